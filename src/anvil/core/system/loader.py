"""
Reads XML build descriptions into :class:`Element` trees and loads element trees into a :class:`Project`.

.. code:: xml

    <project name="demo" default="dist">
        <property name="src.dir" value="src"/>
        <target name="dist" depends="compile" description="Builds the distribution.">
            <echo>Building ${project.name}</echo>
        </target>
    </project>
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from lxml import etree

from anvil.core.system.element import Element
from anvil.core.system.errors import ConfigurationError, Location
from anvil.core.system.target import Invocation, Target, split_names

if TYPE_CHECKING:
    from anvil.core.system.project import Project

logger = logging.getLogger(__name__)

TARGET_ATTRIBUTES = frozenset(["name", "depends", "if", "unless", "description"])


def _convert(node: etree._Element, filename: str | None) -> Element:
    element = Element(
        tag=etree.QName(node).localname,
        attributes={str(k): str(v) for k, v in node.attrib.items()},
        location=Location(filename, node.sourceline),
    )
    text = [node.text or ""]
    for child in node:
        # Comments and processing instructions have no string tag, but their tail is text of this node.
        if isinstance(child.tag, str):
            element.append(_convert(child, filename))
        text.append(child.tail or "")
    element.text = "".join(text)
    return element


def parse_build_file(path: Path) -> Element:
    """Parse the XML build description at *path*."""

    logger.debug("Parsing build file %s", path)
    try:
        tree = etree.parse(str(path))
    except OSError as exc:
        raise ConfigurationError(f"unable to read build file: {exc}", Location(str(path))) from exc
    except etree.XMLSyntaxError as exc:
        raise ConfigurationError(f"malformed build file: {exc.msg}", Location(str(path), exc.lineno)) from exc
    return _convert(tree.getroot(), str(path))


def parse_build_string(text: str, filename: str | None = None) -> Element:
    """Parse an XML build description from a string. The *filename* is only used for locations."""

    try:
        root = etree.fromstring(text.encode("utf-8"))
    except etree.XMLSyntaxError as exc:
        raise ConfigurationError(f"malformed build description: {exc.msg}", Location(filename, exc.lineno)) from exc
    return _convert(root, filename)


class ProjectLoader:
    """
    Loads the element tree of a build description into a project.

    The `<project>` element's attributes name the project (`name`), its default target (`default`), its base
    directory (`basedir`, relative to the project's current base directory) and describe it (`description`).
    Every `<target>` child becomes a :class:`Target`. All other children are top-level tasks and types; they are
    added to the project's root target and performed once the whole tree is loaded.

    Top-level tasks and types are created right before they are performed, so that a `<taskdef>` can define
    elements that are used further down. The tasks and types of targets are created after the top-level tasks
    ran, so that unknown elements and classes with invalid declarations fail before any target runs. All of them
    are configured, and their `id`s registered, only when they are performed.
    """

    def __init__(self, project: Project) -> None:
        self.project = project

    def load(self, root: Element) -> Project:
        project = self.project
        if root.tag.lower() != "project":
            raise ConfigurationError(f"expected a <project> root element, got <{root.tag}>", root.location)

        project.source = root
        project.name = root.get("name") or project.name
        project.default_target = root.get("default") or None
        project.description = root.get("description")
        basedir = root.get("basedir")
        if basedir and project.parent is None:
            project.basedir = project.resolve_file(basedir).absolute()
        project.init_builtin_properties()

        for child in root.children:
            tag = child.tag.lower()
            if tag == "target":
                project.add_target(self.load_target(child))
            elif tag == "description":
                project.description = child.text.strip()
            else:
                project.root_target.add(Invocation(element=child))

        logger.debug("Loaded project %r with %d target(s)", project.name, len(project.targets))
        project.execute_root()

        for target in project.targets.values():
            for invocation in target:
                invocation.instantiate(project)
        return project

    def load_target(self, element: Element) -> Target:
        for name in element.attributes:
            if name.lower() not in TARGET_ATTRIBUTES:
                raise ConfigurationError(f"<target> doesn't support the {name!r} attribute.", element.location)

        name = element.get("name")
        if not name:
            raise ConfigurationError("<target> requires the 'name' attribute", element.location)

        target = Target(
            name=name,
            depends=split_names(element.get("depends")),
            if_condition=element.get("if"),
            unless_condition=element.get("unless"),
            description=element.get("description"),
            location=element.location,
        )
        for child in element.children:
            target.add(Invocation(element=child))
        return target
