"""Tests for selection resolution and the operation planner."""

import pytest

from conftest import make_document
from gql_typegen.core.errors import (
    ConflictingSelectionError,
    InvalidFragmentTargetError,
    UnknownFieldError,
    UnknownFragmentError,
)
from gql_typegen.core.ir import GeneratedStruct, ListShape, NamedShape, OptionalShape
from gql_typegen.core.options import CodegenOptions, DeprecationStrategy
from gql_typegen.core.resolver import (
    DEFAULT_DEPRECATION_MESSAGE,
    SelectionResolver,
    deprecation_marker,
)
from gql_typegen.core.schema import DeprecationStatus, OperationKind, TypeKind


def _fields(struct: GeneratedStruct) -> dict:
    return {f.wire_name: f for f in struct.fields}


class TestPlan:
    """End-to-end planning of simple operations."""

    def test_simple_query(self, plan_for):
        plan = plan_for("query MyQuery { user { id name tag } }")
        assert plan.operation_name == "MyQuery"
        assert plan.operation_kind is OperationKind.QUERY
        assert plan.module_name == "my_query"
        assert plan.response.name == "ResponseData"
        assert plan.definitions[-1] is plan.response

        user = _fields(plan.response)["user"]
        assert user.shape == OptionalShape(NamedShape("MyQueryUser"))

        struct = plan.get_definition("MyQueryUser")
        fields = _fields(struct)
        assert list(fields) == ["id", "name", "tag"]
        assert fields["id"].shape == NamedShape("ID")
        assert fields["name"].shape == OptionalShape(NamedShape("String"))
        assert fields["tag"].shape == OptionalShape(NamedShape("Tag"))
        assert [e.name for e in plan.enums] == ["Tag"]
        assert plan.scalars == []

    def test_query_text_is_document_source(self, plan_for):
        source = "query MyQuery { user { id } }\n"
        assert plan_for(source).query_text == source

    def test_nested_names_follow_response_path(self, plan_for):
        plan = plan_for("query MyQuery { user { friends { friends { id } } } }")
        names = [d.name for d in plan.definitions]
        assert names == ["MyQueryUserFriendsFriends", "MyQueryUserFriends", "MyQueryUser", "ResponseData"]
        friends = _fields(plan.get_definition("MyQueryUser"))["friends"]
        assert friends.shape == OptionalShape(ListShape(NamedShape("MyQueryUserFriends")))

    def test_aliases_give_distinct_structs(self, plan_for):
        plan = plan_for('query Q { first: user(id: "1") { id } second: user(id: "2") { name } }')
        fields = _fields(plan.response)
        assert fields["first"].type_name == "QFirst"
        assert fields["second"].type_name == "QSecond"
        assert _fields(plan.get_definition("QSecond"))["name"].shape == OptionalShape(NamedShape("String"))

    def test_field_renaming(self, plan_for):
        plan = plan_for("query Q { user { createdAt handle: name } }")
        fields = _fields(plan.get_definition("QUser"))
        assert fields["createdAt"].name == "created_at"
        assert fields["createdAt"].needs_rename
        assert fields["handle"].name == "handle"
        assert not fields["handle"].needs_rename

    def test_custom_scalar_collected(self, plan_for):
        plan = plan_for("query Q { user { createdAt } }")
        assert [s.name for s in plan.scalars] == ["DateTime"]

    def test_required_list_of_nullable(self, plan_for):
        plan = plan_for("query Q { user { scores } }")
        scores = _fields(plan.get_definition("QUser"))["scores"]
        assert scores.shape == ListShape(OptionalShape(NamedShape("Int")))

    def test_mutation_and_subscription_roots(self, plan_for):
        mutation = plan_for('mutation Rename { rename(id: "1", name: "x") { id } }')
        assert mutation.operation_kind is OperationKind.MUTATION
        assert mutation.get_definition("RenameRename") is not None

        subscription = plan_for("subscription OnChange { userChanged { id } }")
        assert subscription.get_definition("OnChangeUserChanged") is not None

    def test_unknown_field(self, plan_for):
        with pytest.raises(UnknownFieldError) as exc_info:
            plan_for("query Q { user { nickname } }")
        assert exc_info.value.type_name == "User"
        assert "id" in exc_info.value.available

    def test_required_flags_set(self, schema, plan_for):
        plan_for("query Q { user { tag } }")
        assert schema.lookup("Tag").required
        assert schema.lookup("User").required
        assert not schema.lookup("Pet").required


class TestDeprecation:
    """Tests for deprecation strategies."""

    QUERY = "query Q { user { name oldName legacy } }"

    def test_marker(self):
        deprecated = DeprecationStatus(True, "Gone")
        assert deprecation_marker(deprecated, DeprecationStrategy.WARN) == (True, "Gone")
        assert deprecation_marker(deprecated, DeprecationStrategy.ALLOW) == (True, None)
        assert deprecation_marker(deprecated, DeprecationStrategy.DENY) == (False, None)
        assert deprecation_marker(DeprecationStatus(), DeprecationStrategy.DENY) == (True, None)

    def test_warn(self, plan_for):
        plan = plan_for(self.QUERY, options=CodegenOptions(deprecation_strategy=DeprecationStrategy.WARN))
        fields = _fields(plan.get_definition("QUser"))
        assert fields["name"].deprecation is None
        assert fields["oldName"].deprecation == "Use name"
        assert fields["legacy"].deprecation == DEFAULT_DEPRECATION_MESSAGE

    def test_allow(self, plan_for):
        plan = plan_for(self.QUERY, options=CodegenOptions(deprecation_strategy=DeprecationStrategy.ALLOW))
        fields = _fields(plan.get_definition("QUser"))
        assert list(fields) == ["name", "oldName", "legacy"]
        assert all(f.deprecation is None for f in fields.values())

    def test_deny(self, plan_for):
        plan = plan_for(self.QUERY, options=CodegenOptions(deprecation_strategy=DeprecationStrategy.DENY))
        assert list(_fields(plan.get_definition("QUser"))) == ["name"]

    def test_deny_drops_types_only_reached_through_deprecated_fields(self, plan_for):
        plan = plan_for(
            "query Q { user { id oldTag } }",
            options=CodegenOptions(deprecation_strategy=DeprecationStrategy.DENY),
        )
        assert plan.enums == []


class TestNaming:
    """Generated names stay unique when response paths concatenate alike."""

    def test_sibling_paths_with_same_concatenation(self, plan_for):
        plan = plan_for("query Q { user { friends { id } } userFriends: users { name } }")
        names = [d.name for d in plan.definitions]
        assert names == ["QUserFriends", "QUser", "QUserFriends2", "ResponseData"]
        assert _fields(plan.response)["userFriends"].shape == ListShape(NamedShape("QUserFriends2"))
        assert list(_fields(plan.get_definition("QUserFriends"))) == ["id"]
        assert list(_fields(plan.get_definition("QUserFriends2"))) == ["name"]

    def test_path_name_does_not_take_fragment_name(self, plan_for):
        plan = plan_for("""
            query Q { user { ...QUser } }
            fragment QUser on User { id }
        """)
        names = [d.name for d in plan.definitions]
        assert names == ["QUser", "QUser2", "ResponseData"]
        assert _fields(plan.response)["user"].shape == OptionalShape(NamedShape("QUser2"))
        assert _fields(plan.get_definition("QUser2"))["QUser"].flatten

    def test_claim_name(self, schema):
        document = make_document("query Q { user { id } }")
        resolver = SelectionResolver(schema, document, CodegenOptions(), reserved=["Tag"])
        assert resolver.claim_name("Tag") == "Tag2"
        assert resolver.claim_name("Tag") == "Tag3"
        assert resolver.claim_name("ResponseData") == "ResponseData2"
        assert resolver.claim_name("QUser") == "QUser"


class TestDuplicates:
    """Tests for repeated response keys."""

    def test_identical_duplicates_merged(self, plan_for):
        plan = plan_for("query Q { user { id name id } }")
        assert list(_fields(plan.get_definition("QUser"))) == ["id", "name"]

    def test_same_fragment_spread_twice(self, plan_for):
        plan = plan_for("""
            query Q { user { ...UserFields ...UserFields } }
            fragment UserFields on User { id }
        """)
        assert list(_fields(plan.get_definition("QUser"))) == ["UserFields"]

    def test_alias_conflict(self, plan_for):
        with pytest.raises(ConflictingSelectionError) as exc_info:
            plan_for("query Q { user { id: name id } }")
        assert exc_info.value.response_key == "id"
        assert exc_info.value.struct_name == "QUser"

    def test_sub_selection_conflict(self, plan_for):
        with pytest.raises(ConflictingSelectionError):
            plan_for("query Q { user { friends { id } friends { name } } }")


class TestFragments:
    """Tests for fragment spreads."""

    def test_spread_is_flattened(self, plan_for):
        plan = plan_for("""
            query Q { user { id ...UserFields } }
            fragment UserFields on User { name tag }
        """)
        spread = _fields(plan.get_definition("QUser"))["UserFields"]
        assert spread.name == "user_fields"
        assert spread.flatten
        assert not spread.indirect
        assert spread.shape == NamedShape("UserFields")

        fragment = plan.get_definition("UserFields")
        assert list(_fields(fragment)) == ["name", "tag"]
        assert [(f.name, f.on, f.on_kind) for f in plan.fragments] == [("UserFields", "User", TypeKind.OBJECT)]
        # Fragments are defined before the operation structs that use them.
        names = [d.name for d in plan.definitions]
        assert names.index("UserFields") < names.index("QUser")

    def test_interface_fragment_on_object(self, plan_for):
        plan = plan_for("""
            query Q { user { ...NodeFields } }
            fragment NodeFields on Node { id }
        """)
        assert _fields(plan.get_definition("QUser"))["NodeFields"].flatten
        assert plan.fragments[0].on_kind is TypeKind.INTERFACE

    def test_fragment_nested_names(self, plan_for):
        plan = plan_for("""
            query Q { user { ...UserFields } }
            fragment UserFields on User { friends { id } }
        """)
        assert plan.get_definition("UserFieldsFriends") is not None

    def test_recursive_fragment(self, plan_for):
        plan = plan_for("""
            query Q { user { ...UserTree } }
            fragment UserTree on User { id friends { ...UserTree } }
        """)
        assert plan.fragments[0].recursive
        nested = _fields(plan.get_definition("UserTreeFriends"))["UserTree"]
        assert nested.indirect
        # The spread at the top is still indirect: it points into the cycle.
        assert _fields(plan.get_definition("QUser"))["UserTree"].indirect

    def test_unused_fragment_not_planned(self, plan_for):
        plan = plan_for("""
            query Q { user { id } }
            fragment Unused on User { name }
        """)
        assert plan.fragments == []
        assert plan.get_definition("Unused") is None

    def test_unknown_fragment(self, plan_for):
        with pytest.raises(UnknownFragmentError) as exc_info:
            plan_for("query Q { user { ...Missing } } fragment Other on User { id }")
        assert exc_info.value.fragment_name == "Missing"
        assert exc_info.value.available == ["Other"]

    def test_fragment_on_enum(self, plan_for):
        with pytest.raises(InvalidFragmentTargetError) as exc_info:
            plan_for("query Q { user { ...Bad } } fragment Bad on Tag { id }")
        assert exc_info.value.type_name == "Tag"

    def test_resolve_fragment_on_scalar(self, schema):
        document = make_document("fragment Bad on String { length }")
        resolver = SelectionResolver(schema, document, CodegenOptions())
        with pytest.raises(InvalidFragmentTargetError):
            resolver.resolve_fragment(document.fragments["Bad"])
