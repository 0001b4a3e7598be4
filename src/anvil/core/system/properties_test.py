from anvil.core.system.properties import PropertyStore


def test__PropertyStore__first_writer_wins() -> None:
    store = PropertyStore()
    assert store.set("version", "1.0")
    assert not store.set("version", "2.0")
    assert store["version"] == "1.0"


def test__PropertyStore__override() -> None:
    store = PropertyStore()
    store.set("version", "1.0")
    assert store.set("version", "2.0", override=True)
    assert store["version"] == "2.0"


def test__PropertyStore__user_properties_are_immutable() -> None:
    store = PropertyStore()
    store.set_user("version", "1.0")
    assert not store.set("version", "2.0")
    assert not store.set("version", "2.0", override=True)
    assert store["version"] == "1.0"
    assert store.is_user_property("version")
    assert store.user_properties() == {"version": "1.0"}


def test__PropertyStore__inherited_properties_do_not_replace_user_properties() -> None:
    store = PropertyStore()
    store.set_user("x", "5")
    store.set_inherited("x", "1")
    store.set_inherited("y", "2")
    assert dict(store) == {"x": "5", "y": "2"}
    assert not store.set("y", "3", override=True)


def test__PropertyStore__resolve() -> None:
    store = PropertyStore()
    store.set("src", "source")
    store.set("dir", "${src}/main")

    assert store.resolve("${src}/app.c") == "source/app.c"
    assert store.resolve("${unknown}/app.c") == "${unknown}/app.c"
    assert store.resolve("$${src}") == "${src}"
    assert store.resolve("cost: $5") == "cost: $5"
    assert store.resolve("no references") == "no references"
    # Values are stored as written, expansion is not recursive.
    assert store.resolve("${dir}") == "${src}/main"


def test__PropertyStore__copy_is_independent() -> None:
    store = PropertyStore()
    store.set_user("a", "1")
    copy = store.copy()
    copy.set("b", "2")
    assert "b" not in store
    assert copy.is_user_property("a")
