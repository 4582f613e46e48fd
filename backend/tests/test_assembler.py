"""
全文整合单元测试
"""
from studyspace.pipeline.assembler import assemble, failure_annotation
from studyspace.pipeline.directives import extract_directives
from studyspace.pipeline.models import Directive, DirectiveKind, Resolution


def _pair(directive, url=None, reason=None):
    return directive, Resolution.resolved(url) if url else Resolution.failed(reason)


class TestAssemble:
    """测试按位置替换"""

    def test_replaces_each_directive_in_place(self):
        text = "Intro\n{{IMAGE: cell}}\nmiddle\n```mermaid\ngraph TD\nA-->B\n```\nend"
        image, diagram = extract_directives(text)

        result = assemble(text, [
            _pair(image, url="https://img.test/cell.png"),
            _pair(diagram, url="/storage/diagrams/d.png"),
        ])

        assert result.content == (
            "Intro\n![cell](https://img.test/cell.png)\nmiddle\n"
            "![mermaid diagram](/storage/diagrams/d.png)\nend"
        )

    def test_identical_spans_get_their_own_result(self):
        """两个文本相同的占位各自替换，不会串位"""
        text = "{{IMAGE: atom}} and {{IMAGE: atom}}"
        first, second = extract_directives(text)

        result = assemble(text, [
            _pair(first, url="https://img.test/1.png"),
            _pair(second, reason="quota exceeded"),
        ])

        assert result.content == (
            "![atom](https://img.test/1.png) and "
            "{{IMAGE: atom}}\n\n*⚠️ Image not found: quota exceeded*"
        )
        assert [m.url for m in result.embedded_media] == ["https://img.test/1.png"]

    def test_input_order_does_not_matter(self):
        text = "a {{IMAGE: x}} b {{GENERATE: y}} c"
        x, y = extract_directives(text)

        forward = assemble(text, [_pair(x, url="u1"), _pair(y, url="u2")])
        backward = assemble(text, [_pair(y, url="u2"), _pair(x, url="u1")])

        assert forward.content == backward.content == "a ![x](u1) b ![y](u2) c"
        assert [m.description for m in backward.embedded_media] == ["x", "y"]

    def test_failure_keeps_original_span(self):
        text = "See:\n{{GENERATE: a neuron}}\nDone."
        (directive,) = extract_directives(text)

        result = assemble(text, [_pair(directive, reason="HTTP 502")])

        assert result.content == (
            "See:\n{{GENERATE: a neuron}}\n\n*⚠️ Image generation failed: HTTP 502*\nDone."
        )
        assert result.embedded_media == []

    def test_manifest_kinds_in_document_order(self):
        text = "```dot\ndigraph { a }\n```\n{{IMAGE: b}}\n{{GENERATE: c}}"
        diagram, search, generated = extract_directives(text)

        result = assemble(text, [
            _pair(generated, url="u3"),
            _pair(diagram, url="u1"),
            _pair(search, url="u2"),
        ])

        assert [m.to_dict() for m in result.embedded_media] == [
            {"description": "dot diagram", "url": "u1", "kind": "diagram"},
            {"description": "b", "url": "u2", "kind": "search"},
            {"description": "c", "url": "u3", "kind": "generated"},
        ]

    def test_no_pairs(self):
        result = assemble("untouched", [])

        assert result.content == "untouched"
        assert result.embedded_media == []


class TestFailureAnnotation:
    """测试失败说明文本"""

    def test_diagram_failure_note(self):
        directive = Directive(
            kind=DirectiveKind.DIAGRAM,
            raw_span="```mermaid\nA-->\n```",
            position=0,
            engine="mermaid",
            source="A-->",
        )

        assert failure_annotation(directive, "Diagram syntax error: Parse error") == (
            "```mermaid\nA-->\n```\n\n*⚠️ Diagram rendering failed: Diagram syntax error: Parse error*"
        )
