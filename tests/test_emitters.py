"""Tests for the Python and Rust emitters and the code generator."""

from datetime import datetime

import pytest

from conftest import SCHEMA_SDL, load_generated, make_document
from gql_typegen.core.errors import ConfigError
from gql_typegen.core.generator import CodeGenerator, load_generator
from gql_typegen.core.ir import (
    AbsentLiteral,
    EnumLiteral,
    InputObjectLiteral,
    ListLiteral,
    ListShape,
    NamedShape,
    OptionalShape,
    PresentLiteral,
    StringLiteral,
)
from gql_typegen.core.options import CodegenMode, CodegenOptions, TargetLanguage
from gql_typegen.core.scalars import ScalarMapping, ScalarRegistry
from gql_typegen.emitters import get_emitter, make_environment, safe_comment, safe_docstring
from gql_typegen.emitters.python import PythonEmitter, query_literal
from gql_typegen.emitters.rust import RustEmitter, rust_name, rust_string

USERS_QUERY = """
query MyQuery($limit: Int = 10, $filter: UserFilter = {tag: RED}) {
  users(filter: $filter, limit: $limit) {
    id
    name
    tag
    createdAt
    oldName
  }
}
"""

PETS_QUERY = """
query Pets {
  pets {
    __typename
    ... on Dog { name barks }
    ... on Cat { meows }
  }
}
"""

NODE_QUERY = """
query Node {
  node(id: "1") {
    __typename
    id
    ... on Dog { barks }
  }
}
"""

NODE_FRAGMENT_QUERY = """
query Node { node(id: "1") { ...NodeBits ... on Dog { barks } } }
fragment NodeBits on Node { __typename id }
"""

TREE_QUERY = """
query Tree { user { ...UserTree } }
fragment UserTree on User { id friends { ...UserTree } }
"""


@pytest.fixture
def python_emitter():
    return PythonEmitter(CodegenOptions(), env=make_environment())


@pytest.fixture
def rust_emitter():
    options = CodegenOptions(target_language=TargetLanguage.RUST)
    options.set_additional_derives("Debug, PartialEq")
    return RustEmitter(options, env=make_environment())


class TestHelpers:
    def test_safe_docstring(self):
        assert safe_docstring('Say """hi"""') == 'Say \\"\\"\\"hi\\"\\"\\" '
        assert safe_docstring('ends with "') == 'ends with " '
        assert safe_docstring(None) == ""

    def test_safe_comment(self):
        assert safe_comment("two\nlines") == "two lines"

    def test_query_literal(self):
        assert query_literal("query Q { a }") == '"""query Q { a }"""'
        assert query_literal('query Q { a(s: """x""") }') == repr('query Q { a(s: """x""") }')

    def test_rust_helpers(self):
        assert rust_name("type") == "type_"
        assert rust_name("name") == "name"
        assert rust_string('say "hi"\n') == '"say \\"hi\\"\\n"'

    def test_get_emitter(self):
        options = CodegenOptions()
        assert isinstance(get_emitter(TargetLanguage.PYTHON, options), PythonEmitter)
        assert isinstance(get_emitter(TargetLanguage.RUST, options), RustEmitter)

    def test_custom_template_dir(self, tmp_path, plan_for):
        (tmp_path / "python_module.py.j2").write_text("# custom {{ plan.operation_name }}\n")
        emitter = get_emitter(TargetLanguage.PYTHON, CodegenOptions(), template_dir=tmp_path)
        assert emitter.emit(plan_for("query MyQuery { user { id } }")) == "# custom MyQuery\n"


class TestPythonTypes:
    def test_type_expr(self, python_emitter):
        assert python_emitter.type_expr(OptionalShape(ListShape(NamedShape("Int")))) == "Optional[List[int]]"
        assert python_emitter.type_expr(ListShape(NamedShape("MyQueryUser"))) == "List[MyQueryUser]"
        assert python_emitter.type_expr(NamedShape("ID")) == "str"

    def test_render_literal(self, python_emitter):
        literal = InputObjectLiteral(
            type_name="UserFilter",
            fields=(
                ("name", PresentLiteral(StringLiteral("x"))),
                ("tag", PresentLiteral(EnumLiteral("Tag", "RED"))),
                ("limit", AbsentLiteral()),
            ),
        )
        assert python_emitter.render_literal(literal) == "UserFilter(name='x', tag=Tag('RED'))"
        assert python_emitter.render_literal(ListLiteral((StringLiteral("a"),))) == "['a']"


class TestPythonModules:
    """Generated modules are executed and used to parse responses."""

    def test_module_source(self, python_emitter, plan_for):
        source = python_emitter.emit(plan_for(USERS_QUERY))
        assert 'OPERATION_NAME = "MyQuery"' in source
        assert "from datetime import datetime" in source
        assert "DateTime = datetime" in source
        assert "class Tag(OpenEnum):" in source
        assert "class MyQuery:" in source
        assert "created_at: Optional[DateTime] = Field(default=None, alias='createdAt')" in source
        assert "deprecated='Use name'" in source

    def test_response_parsing(self, python_emitter, plan_for):
        module = load_generated(python_emitter.emit(plan_for(USERS_QUERY)), "generated_my_query")
        data = module.ResponseData.model_validate({
            "users": [
                {"id": "1", "name": "Ann", "tag": "RED", "createdAt": "2024-01-15T10:30:00", "oldName": None},
                {"id": "2", "name": None, "tag": "PURPLE", "createdAt": None, "oldName": None},
            ]
        })
        first, second = data.users
        assert first.tag is module.Tag.RED
        assert first.created_at == datetime(2024, 1, 15, 10, 30)
        assert not second.tag.is_known
        assert str(second.tag) == "PURPLE"

    def test_variables(self, python_emitter, plan_for):
        module = load_generated(python_emitter.emit(plan_for(USERS_QUERY)), "generated_my_query_vars")
        assert module.Variables.default_limit() == 10
        variables = module.Variables(filter=module.Variables.default_filter())
        assert variables.to_variables() == {"filter": {"tag": "RED"}}

        body = module.MyQuery.build_query(module.Variables(limit=5))
        assert body["operationName"] == "MyQuery"
        assert body["query"] == USERS_QUERY
        assert body["variables"] == {"limit": 5}

    def test_renamed_variable(self, python_emitter, plan_for):
        plan = plan_for("query ById($userId: ID!) { user(id: $userId) { id } }")
        module = load_generated(python_emitter.emit(plan), "generated_by_id")
        assert module.Variables(user_id="7").to_variables() == {"userId": "7"}

    def test_union(self, python_emitter, plan_for):
        source = python_emitter.emit(plan_for(PETS_QUERY))
        assert "class PetsPetsUnselected(ResponseModel):" in source
        module = load_generated(source, "generated_pets")
        data = module.ResponseData.model_validate({
            "pets": [
                {"__typename": "Dog", "name": "Rex", "barks": True},
                {"__typename": "Bird"},
                {"__typename": "Cat", "meows": False},
            ]
        })
        dog, bird, cat = data.pets
        assert isinstance(dog, module.PetsPetsOnDog)
        assert dog.barks
        assert isinstance(bird, module.PetsPetsUnselected)
        assert bird.typename == "Bird"
        assert isinstance(cat, module.PetsPetsOnCat)
        assert data.model_dump(by_alias=True)["pets"][1] == {"__typename": "Bird"}

    def test_interface_on_field(self, python_emitter, plan_for):
        module = load_generated(python_emitter.emit(plan_for(NODE_QUERY)), "generated_node")
        node = module.ResponseData.model_validate(
            {"node": {"__typename": "Dog", "id": "1", "barks": True}}
        ).node
        assert node.id == "1"
        assert isinstance(node.on, module.NodeNodeOnDog)
        assert node.model_dump(by_alias=True) == {"__typename": "Dog", "id": "1", "barks": True}

        user = module.NodeNode.model_validate({"__typename": "User", "id": "2"})
        assert isinstance(user.on, module.NodeNodeOnUnselected)

    def test_interface_typename_from_fragment(self, python_emitter, plan_for):
        source = python_emitter.emit(plan_for(NODE_FRAGMENT_QUERY))
        module = load_generated(source, "generated_node_fragment")
        node = module.ResponseData.model_validate(
            {"node": {"__typename": "Dog", "id": "1", "barks": True}}
        ).node
        assert node.node_bits.typename == "Dog"
        assert node.node_bits.id == "1"
        assert isinstance(node.on, module.NodeNodeOnDog)
        assert node.on.barks

    def test_fragment_flattening(self, python_emitter, plan_for):
        plan = plan_for("""
            query WithFragment { user { id ...UserFields } }
            fragment UserFields on User { name tag }
        """)
        module = load_generated(python_emitter.emit(plan), "generated_with_fragment")
        user = module.ResponseData.model_validate(
            {"user": {"id": "1", "name": "Ann", "tag": "BLUE"}}
        ).user
        assert user.user_fields.name == "Ann"
        assert user.model_dump(mode="json") == {"id": "1", "name": "Ann", "tag": "BLUE"}

    def test_recursive_fragment(self, python_emitter, plan_for):
        module = load_generated(python_emitter.emit(plan_for(TREE_QUERY)), "generated_tree")
        user = module.ResponseData.model_validate({
            "user": {"id": "1", "friends": [{"id": "2", "friends": None}]}
        }).user
        assert user.user_tree.friends[0].user_tree.id == "2"

    def test_registered_scalar(self, plan_for):
        scalars = ScalarRegistry()
        scalars.register("DateTime", ScalarMapping("str"))
        emitter = PythonEmitter(CodegenOptions(), env=make_environment(), scalars=scalars)
        source = emitter.emit(plan_for("query Q { user { createdAt } }"))
        assert "DateTime = str" in source
        assert "from datetime import datetime" not in source


class TestRustModules:
    def test_module_structure(self, rust_emitter, plan_for):
        code = rust_emitter.emit(plan_for("query MyQuery { user { id name tag oldName } }"))
        assert "pub struct MyQuery;" in code
        assert "pub mod my_query {" in code
        assert 'pub const OPERATION_NAME: &str = "MyQuery";' in code
        assert "pub enum Tag {" in code
        assert "Other(String)," in code
        assert "#[derive(Deserialize, Debug, PartialEq)]" in code
        assert "#[derive(Debug, PartialEq)]\n    pub enum Tag" in code
        assert "pub struct MyQueryUser {" in code
        assert "pub id: ID," in code
        assert "pub name: Option<String>," in code
        assert "#[serde(rename = \"oldName\")]" in code
        assert '#[deprecated(note = "Use name")]' in code
        assert "pub struct Variables;" in code
        assert "impl graphql_client::GraphQLQuery for MyQuery {" in code

    def test_union(self, rust_emitter, plan_for):
        code = rust_emitter.emit(plan_for(PETS_QUERY))
        assert '#[serde(tag = "__typename")]\n    pub enum PetsPets {' in code
        assert "Dog(PetsPetsOnDog)," in code
        assert "        Bird,\n" in code
        assert "__typename" not in code.split("pub struct PetsPetsOnDog {")[1].split("}")[0]

    def test_interface_on_field(self, rust_emitter, plan_for):
        code = rust_emitter.emit(plan_for(NODE_QUERY))
        node = code.split("pub struct NodeNode {")[1].split("}")[0]
        assert "#[serde(flatten)]\n        pub on: NodeNodeOn," in node
        assert "typename" not in node

    def test_on_field_precedes_flattened_fragments(self, rust_emitter, plan_for):
        code = rust_emitter.emit(plan_for(NODE_FRAGMENT_QUERY))
        node = code.split("pub struct NodeNode {")[1].split("}")[0]
        assert node.index("pub on: NodeNodeOn,") < node.index("pub node_bits: NodeBits,")
        bits = code.split("pub struct NodeBits {")[1].split("}")[0]
        assert '#[serde(rename = "__typename")]' in bits

    def test_recursive_fragment_is_boxed(self, rust_emitter, plan_for):
        code = rust_emitter.emit(plan_for(TREE_QUERY))
        assert "pub user_tree: Box<UserTree>," in code

    def test_variables_and_defaults(self, rust_emitter, plan_for):
        code = rust_emitter.emit(plan_for(USERS_QUERY))
        assert "pub limit: Option<Int>," in code
        assert "pub nested: Option<Box<UserFilter>>," in code
        assert "pub fn default_limit() -> Option<Int> {\n            Some(10)" in code
        assert "Some(UserFilter { name: None, tag: Some(Tag::RED), limit: None, nested: None })" in code
        assert "type DateTime = super::DateTime;" in code

    def test_layout_bundles_operations(self, rust_emitter, plan_for):
        first = plan_for("query First { user { id } }")
        second = plan_for('mutation Second { rename(id: "1", name: "x") { id } }')
        files = rust_emitter.layout(
            [(first, rust_emitter.emit(first)), (second, rust_emitter.emit(second))],
            "operations",
        )
        assert list(files) == ["operations.rs"]
        assert "pub mod first {" in files["operations.rs"]
        assert "pub mod second {" in files["operations.rs"]


class TestCodeGenerator:
    SOURCE = """
        query First { user { id } }
        query Second { pet { __typename } }
    """

    def _generator(self, schema, **kwargs):
        options = CodegenOptions(format_output=False, mode=CodegenMode.CLI, **kwargs)
        return CodeGenerator(schema, make_document(self.SOURCE), options)

    def test_python_file_per_operation(self, schema):
        files = self._generator(schema).render("queries")
        assert sorted(files) == ["first.py", "second.py"]

    def test_rust_single_file(self, schema):
        files = self._generator(schema, target_language=TargetLanguage.RUST).render("queries")
        assert list(files) == ["queries.rs"]

    def test_selected_operation(self, schema):
        files = self._generator(schema, selected_operation_name="Second").render()
        assert list(files) == ["second.py"]

    def test_header(self, schema):
        files = self._generator(schema, header="# Generated").render()
        assert files["first.py"].startswith("# Generated\n\n")

    def test_generate_writes_files(self, schema, tmp_path):
        written = self._generator(schema, output_directory=tmp_path / "out").generate()
        assert sorted(p.name for p in written) == ["first.py", "second.py"]
        assert (tmp_path / "out" / "first.py").read_text().startswith('"""Types for the query First.')

    def test_generate_needs_output_directory(self, schema):
        with pytest.raises(ConfigError):
            self._generator(schema).generate()

    def test_load_generator_writes_rust_bundle_named_after_query_file(self, tmp_path):
        schema_path = tmp_path / "schema.graphql"
        schema_path.write_text(SCHEMA_SDL)
        query_path = tmp_path / "users.graphql"
        query_path.write_text(self.SOURCE)
        options = CodegenOptions(
            format_output=False,
            target_language=TargetLanguage.RUST,
            output_directory=tmp_path / "out",
        )
        generator = load_generator(schema_path, query_path, options)
        written = generator.generate(query_path.stem)
        assert written == [tmp_path / "out" / "users.rs"]
        assert "pub mod first {" in written[0].read_text()
