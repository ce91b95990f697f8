"""Tests for the Catalyst plugin."""

from __future__ import annotations

import textwrap

import pytest

from cemgen.analyzers import ModuleAnalyzer
from cemgen.plugins.catalyst import CatalystPlugin, controller_tag_name
from cemgen.plugins.pipeline import PluginPipeline
from cemgen.syntax import TREE_SITTER_AVAILABLE


def test_controller_tag_name() -> None:
    assert controller_tag_name("HelloWorldElement") == "hello-world"
    assert controller_tag_name("UserList") == "user-list"


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter grammars not installed")
def test_controller_and_attr_decorators() -> None:
    analyzer = ModuleAnalyzer(pipeline=PluginPipeline([CatalystPlugin()]))
    result = analyzer.analyze(
        "src/hello-world.ts",
        textwrap.dedent(
            """
            import { controller, attr } from '@github/catalyst';

            @controller
            export class HelloWorldElement extends HTMLElement {
              @attr fooBar = 'hello';
              plain = 1;
            }
            """
        ).lstrip("\n"),
    )

    declaration = result.module.declarations[0]
    assert declaration.tag_name == "hello-world"
    foo = declaration.member("fooBar")
    assert foo.attribute == "data-foo-bar"
    assert foo.reflects is True
    assert declaration.member("plain").attribute is None
    assert [attribute.name for attribute in declaration.attributes] == ["data-foo-bar"]
    assert [definition.tag_name for definition in result.module.definitions] == ["hello-world"]
