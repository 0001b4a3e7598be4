from pytest import raises

from anvil.common.supplier import Supplier


def test__Supplier__of_and_map() -> None:
    supplier = Supplier.of(21).map(lambda v: v * 2)
    assert supplier.get() == 42
    assert not supplier.is_empty()


def test__Supplier__void_is_empty() -> None:
    supplier: Supplier[int] = Supplier.void()
    assert supplier.is_void()
    assert supplier.is_empty()
    assert supplier.get_or(None) is None
    with raises(Supplier.Empty):
        supplier.get()
    with raises(Supplier.Empty):
        supplier.map(lambda v: v + 1).get()


def test__Supplier__of_callable_is_evaluated_lazily() -> None:
    values = ["a"]
    supplier = Supplier.of_callable(lambda: values[-1])
    values.append("b")
    assert supplier.get() == "b"


def test__Supplier__lineage() -> None:
    a = Supplier.of(1)
    b = a.map(str)
    assert [s for s, _ in b.lineage()] == [b, a]
