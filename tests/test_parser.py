"""Tests for the FX parser and AST construction."""

import pytest
from pathlib import Path

from fxc.parser.shader_parser import ShaderParser, parse_fx
from fxc.parser.ast_nodes import (
    ShaderDef, UniformDecl, InputDecl, FunctionDecl, OutputBinding, Stage,
)
from fxc.errors import ParseError, LexError, SEMANTIC

FIXTURES = Path(__file__).parent / "fixtures"


class TestSharedProductions:
    def test_uniform(self):
        p = ShaderParser("uniform mat4 mvp;")
        assert p.parse_uniform() == UniformDecl("mat4", "mvp")
        assert p.diagnostics == []

    def test_input(self):
        p = ShaderParser("input vec2 uv;")
        assert p.parse_input() == InputDecl("vec2", "uv")

    def test_uniform_requires_type(self):
        p = ShaderParser("uniform color mvp;")
        assert p.parse_uniform() is None
        assert len(p.diagnostics) == 1
        assert p.diagnostics[0].kind == SEMANTIC
        assert p.diagnostics[0].line == 1
        assert p.diagnostics[0].column == 9

    def test_uniform_requires_name(self):
        p = ShaderParser("uniform float ;")
        assert p.parse_uniform() is None
        assert "expected identifier" in str(p.diagnostics[0])

    def test_uniform_requires_semicolon(self):
        p = ShaderParser("uniform float u }")
        assert p.parse_uniform() is None
        assert "';'" in str(p.diagnostics[0])

    def test_input_rejects_keyword_type(self):
        p = ShaderParser("input void pos;")
        assert p.parse_input() is None

    def test_sampler_types_accepted(self):
        p = ShaderParser("uniform sampler2D tex; uniform samplerCube env;")
        assert p.parse_uniform() == UniformDecl("sampler2D", "tex")
        assert p.parse_uniform() == UniformDecl("samplerCube", "env")


class TestBlockSyntax:
    def test_basic_shader(self):
        src = (
            "shader Basic { uniform float intensity; input vec3 pos; "
            "void vertex() { gl_Position = vec4(pos, 1.0); } void fragment() { } }"
        )
        shaders = parse_fx(src)
        assert len(shaders) == 1
        s = shaders[0]
        assert s.name == "Basic"
        assert s.uniforms == [UniformDecl("float", "intensity")]
        assert s.inputs == [InputDecl("vec3", "pos")]
        assert [(f.name, f.stage) for f in s.functions] == [
            ("vertex", Stage.VERTEX), ("fragment", Stage.FRAGMENT),
        ]
        assert s.functions[0].body == "gl_Position = vec4(pos, 1.0); "
        assert s.functions[1].body == ""
        assert not s.functions[0].transpiled

    def test_body_is_verbatim(self):
        src = "shader S { void vertex() { x  =  y;   // keep\n  z=w; } }"
        body = parse_fx(src)[0].functions[0].body
        assert body == "x  =  y;   // keep\n  z=w; "

    def test_body_keeps_nested_braces(self):
        src = "shader S { void fragment() { if (a) { b = 1.0; } else { b = 2.0; } c = b; } }"
        body = parse_fx(src)[0].functions[0].body
        assert body == "if (a) { b = 1.0; } else { b = 2.0; } c = b; "

    def test_fixture(self):
        s = parse_fx((FIXTURES / "basic.fx").read_text())[0]
        assert s.functions[0].body == "gl_Position = vec4(pos, 1.0);\n    "

    def test_other_function_has_no_stage(self):
        s = parse_fx("shader S { void helper() { } }")[0]
        assert s.functions[0].stage is Stage.OTHER

    def test_fragment_output_binding(self):
        s = parse_fx("shader S { void fragment(out vec4 color) { color = vec4(1.0); } }")[0]
        fn = s.functions[0]
        assert fn.output == OutputBinding("vec4", "color")
        assert fn.body == "color = vec4(1.0); "

    def test_output_binding_only_on_fragment(self):
        with pytest.raises(ParseError):
            parse_fx("shader S { void vertex(out vec4 color) { } }")

    def test_output_binding_requires_type(self):
        with pytest.raises(ParseError) as exc:
            parse_fx("shader S { void fragment(out sampler2D c) { } }")
        assert exc.value.kind == SEMANTIC

    def test_multiple_shaders_in_order(self):
        shaders = parse_fx("shader A { } shader B { } shader C { }")
        assert [s.name for s in shaders] == ["A", "B", "C"]

    def test_declaration_order_preserved(self):
        src = """
        shader S {
            uniform float c;
            input vec3 p;
            uniform vec4 a;
            input vec2 t;
            uniform mat4 b;
        }
        """
        s = parse_fx(src)[0]
        assert [u.name for u in s.uniforms] == ["c", "a", "b"]
        assert [i.name for i in s.inputs] == ["p", "t"]

    def test_block_does_not_receive_top_level_declarations(self):
        shaders = parse_fx("uniform float u; shader S { void vertex() { } }")
        assert shaders[0].uniforms == []

    def test_missing_closing_brace(self):
        with pytest.raises(ParseError) as exc:
            parse_fx((FIXTURES / "unclosed.fx").read_text())
        assert "'}'" in str(exc.value)

    def test_failure_is_recorded_as_diagnostic(self):
        p = ShaderParser("shader S { uniform float u }")
        with pytest.raises(ParseError) as exc:
            p.parse_shader_file()
        assert p.diagnostics == [exc.value]

    def test_missing_shader_name(self):
        with pytest.raises(ParseError):
            parse_fx("shader { }")

    def test_unexpected_token_in_block(self):
        with pytest.raises(ParseError) as exc:
            parse_fx("shader S {\n  float x;\n}")
        assert exc.value.line == 2
        assert "'float'" in str(exc.value)


class TestStandaloneSyntax:
    def test_anonymous_vertex(self):
        s = parse_fx("vertex_shader() { }")[0]
        assert s.name == "vertex"
        assert s.functions == [FunctionDecl("vertex", Stage.VERTEX, "", transpiled=True)]

    def test_anonymous_fragment(self):
        s = parse_fx("fragment_shader() { }")[0]
        assert s.name == "fragment"
        assert s.functions[0].stage is Stage.FRAGMENT

    def test_named(self):
        s = parse_fx("fragment_shader sky() { }")[0]
        assert s.name == "sky"

    def test_parameters_are_discarded(self):
        s = parse_fx("vertex_shader(vec3 pos : POSITION, Light light, vec2 uv) { }")[0]
        assert s.inputs == []

    def test_trailing_comma_in_parameters(self):
        s = parse_fx("vertex_shader(vec3 pos,) { }")[0]
        assert s.name == "vertex"

    def test_scenario_standalone(self):
        src = "uniform mat4 mvp; vertex_shader(vec3 pos:POSITION){ out vec3 v_position; v_position = pos; }"
        shaders = parse_fx(src)
        assert len(shaders) == 1
        s = shaders[0]
        assert s.name == "vertex"
        assert s.uniforms == [UniformDecl("mat4", "mvp")]
        fn = s.functions[0]
        assert fn.transpiled
        assert fn.body == "out vec3 v_position;\nv_position = pos;\n    "

    def test_pending_declarations_are_copied(self):
        src = """
        uniform float u;
        input vec3 p;
        vertex_shader() { }
        fragment_shader() { }
        """
        vs, fs = parse_fx(src)
        assert vs.uniforms == fs.uniforms == [UniformDecl("float", "u")]
        assert vs.inputs == fs.inputs == [InputDecl("vec3", "p")]
        assert vs.uniforms[0] is not fs.uniforms[0]

        vs.uniforms[0].name = "changed"
        vs.inputs[0].type_name = "vec4"
        assert fs.uniforms[0] == UniformDecl("float", "u")
        assert fs.inputs[0] == InputDecl("vec3", "p")

    def test_pending_declarations_are_not_retroactive(self):
        src = """
        uniform float early;
        vertex_shader() { }
        uniform float late;
        fragment_shader() { }
        """
        vs, fs = parse_fx(src)
        assert [u.name for u in vs.uniforms] == ["early"]
        assert [u.name for u in fs.uniforms] == ["early", "late"]

    def test_mixed_grammars(self):
        src = """
        uniform float t;
        shader Legacy { void vertex() { } }
        vertex_shader modern() { }
        """
        legacy, modern = parse_fx(src)
        assert legacy.uniforms == []
        assert modern.uniforms == [UniformDecl("float", "t")]

    def test_fixture(self):
        vs, fs = parse_fx((FIXTURES / "standalone.fx").read_text())
        assert vs.name == "lit_vs"
        assert fs.name == "lit_fs"
        assert [u.name for u in vs.uniforms] == ["mvp", "albedo"]
        assert [i.name for i in fs.inputs] == ["position", "normal", "uv"]

    def test_bad_parameter_type(self):
        with pytest.raises(ParseError) as exc:
            parse_fx("vertex_shader(; pos) { }")
        assert "parameter type" in str(exc.value)

    def test_missing_parameter_name(self):
        with pytest.raises(ParseError):
            parse_fx("vertex_shader(vec3) { }")

    def test_missing_semantic(self):
        with pytest.raises(ParseError):
            parse_fx("vertex_shader(vec3 pos :) { }")

    def test_missing_separator(self):
        with pytest.raises(ParseError) as exc:
            parse_fx("vertex_shader(vec3 pos vec2 uv) { }")
        assert "',' or ')'" in str(exc.value)

    def test_missing_paren(self):
        with pytest.raises(ParseError):
            parse_fx("vertex_shader { }")

    def test_unterminated_body(self):
        with pytest.raises(ParseError) as exc:
            parse_fx("vertex_shader() { x = 1.0;")
        assert "end of input" in str(exc.value)


class TestShaderFile:
    def test_empty_source(self):
        assert parse_fx("") == []

    def test_only_declarations(self):
        assert parse_fx("uniform float u; input vec3 p;") == []

    def test_unexpected_top_level_token(self):
        with pytest.raises(ParseError) as exc:
            parse_fx("uniform float u;\nvoid main() { }")
        assert exc.value.line == 2

    def test_bad_top_level_uniform(self):
        with pytest.raises(ParseError):
            parse_fx("uniform float;\nvertex_shader() { }")

    def test_unknown_character(self):
        with pytest.raises(LexError):
            parse_fx("shader S { $ }")

    def test_returns_shader_defs(self):
        shaders = parse_fx("shader S { }")
        assert isinstance(shaders[0], ShaderDef)
