"""Tests for the zod schema module generator."""

import logging

import pytest

from gql_tsgen.core.generator import (
    SchemaGenerator,
    enum_expression,
    jsdoc,
    object_expression,
    wrap_type,
)
from gql_tsgen.core.ir import ListTypeRef, NamedTypeRef, NonNullTypeRef
from gql_tsgen.core.nodes import FragmentDefinition, OperationDefinition
from gql_tsgen.core.parser import parse_document
from gql_tsgen.core.scalars import ScalarRegistry, StaticScalarHandler
from gql_tsgen.core.schema_builder import build_schema
from gql_tsgen.errors import GenerationError

SDL = '''
type Query {
  user(id: ID!): User
  users: [User!]!
  tags: [String!]!
  maybeTags: [String]
  search(term: String!): [SearchResult]
  node(id: ID!): Node
}

type Mutation {
  ping: Boolean
}

interface Node {
  id: ID!
}

type User implements Node {
  id: ID!
  name: String
  role: Role!
  friends: [User]
  createdAt: DateTime
  age: Int
  score: Float
  active: Boolean!
}

type Post implements Node {
  id: ID!
  title: String!
}

union SearchResult = User | Post

enum Role { ADMIN USER }

enum Empty

scalar DateTime

"""Filters users"""
input UserFilter {
  role: Role
  name: String
  createdAfter: DateTime
}

input NewUser {
  name: String!
  friend: NewUser
  tags: [String!]
}

input A { b: B }
input B { a: A }
'''


@pytest.fixture
def schema():
    return build_schema(parse_document(SDL))


def make_generator(schema, source: str, **kwargs) -> SchemaGenerator:
    definitions = parse_document(source)
    operations = [d for d in definitions if isinstance(d, OperationDefinition)]
    fragments = [d for d in definitions if isinstance(d, FragmentDefinition)]
    return SchemaGenerator(schema, operations, fragments, **kwargs)


def operation_expression(schema, source: str, **kwargs) -> str:
    generator = make_generator(schema, source, **kwargs)
    return generator.operation_schemas()[0].expression


# =============================================================================
# Expression helpers
# =============================================================================


class TestExpressionHelpers:
    """Tests for the small rendering helpers."""

    def test_nullable_by_default(self):
        assert wrap_type(NamedTypeRef("String"), lambda r: "z.string()") == "z.string().nullable()"

    def test_non_null_list_of_non_null(self):
        ref = NonNullTypeRef(ListTypeRef(NonNullTypeRef(NamedTypeRef("T"))))
        assert wrap_type(ref, lambda r: "T_Schema") == "z.array(T_Schema)"

    def test_nullable_list_of_nullable(self):
        ref = ListTypeRef(NamedTypeRef("T"))
        assert wrap_type(ref, lambda r: "T_Schema") == "z.array(T_Schema.nullable()).nullable()"

    def test_enum_expression(self):
        assert enum_expression(["A", "B"]) == 'z.enum(["A", "B"])'
        assert enum_expression([]) == "z.never()"

    def test_object_expression(self):
        assert object_expression([], 0) == "z.object({})"
        assert object_expression([("a", "z.string()")], 1) == "z.object({\n    a: z.string(),\n  })"

    def test_jsdoc(self):
        assert jsdoc("One line") == "/** One line */"
        assert jsdoc("First\nSecond", indent="  ") == "  /**\n   * First\n   * Second\n   */"
        assert jsdoc("bad */ text") == "/** bad *\\/ text */"


# =============================================================================
# Operation-shaped output
# =============================================================================


class TestOperationSchemas:
    """Tests for response validators."""

    def test_end_to_end_query(self):
        schema = build_schema(
            parse_document("type Query { user(id: ID!): User }\ntype User { id: ID! name: String }")
        )
        generator = make_generator(schema, 'query { user(id: "1") { id name } }')
        output = generator.generate()
        assert (
            "export const QueryOperation_Schema = z.object({\n"
            "  user: z.object({\n"
            "    id: z.string(),\n"
            "    name: z.string().nullable(),\n"
            "  }).nullable(),\n"
            "});\n"
            "export type QueryOperation_Type = z.infer<typeof QueryOperation_Schema>;\n"
        ) in output

    def test_anonymous_mutation(self, schema):
        output = make_generator(schema, "mutation { ping }").generate()
        assert "// Schema for MutationOperation operation" in output
        assert "export const MutationOperation_Schema = z.object({\n  ping: z.boolean().nullable(),\n});" in output
        assert "export type MutationOperation_Type" in output

    def test_scalar_validators(self, schema):
        expression = operation_expression(
            schema, 'query Q { user(id: "1") { age score active createdAt } }'
        )
        assert "age: z.number().int().nullable()," in expression
        assert "score: z.number().nullable()," in expression
        assert "active: z.boolean()," in expression
        assert "createdAt: z.any().nullable()," in expression

    def test_registered_custom_scalar(self, schema):
        scalars = ScalarRegistry()
        scalars.register("DateTime", StaticScalarHandler("z.string().datetime()", "string"))
        expression = operation_expression(
            schema, 'query Q { user(id: "1") { createdAt } }', scalars=scalars
        )
        assert "createdAt: z.string().datetime().nullable()," in expression

    def test_lists(self, schema):
        expression = operation_expression(schema, "query Q { tags maybeTags users { id } }")
        assert "tags: z.array(z.string())," in expression
        assert "maybeTags: z.array(z.string().nullable()).nullable()," in expression
        assert "users: z.array(z.object({\n    id: z.string(),\n  }))," in expression

    def test_enum_is_inlined(self, schema):
        expression = operation_expression(schema, 'query Q { user(id: "1") { role } }')
        assert 'role: z.enum(["ADMIN", "USER"]),' in expression

    def test_alias_is_the_key(self, schema):
        expression = operation_expression(schema, 'query Q { me: user(id: "1") { handle: name } }')
        assert "me: z.object({" in expression
        assert "handle: z.string().nullable()," in expression
        assert "user:" not in expression

    def test_typename(self, schema):
        expression = operation_expression(schema, 'query Q { user(id: "1") { __typename } }')
        assert "__typename: z.string()," in expression

    def test_first_response_key_wins(self, schema):
        expression = operation_expression(schema, 'query Q { user(id: "1") { name name } }')
        assert expression.count("name:") == 1

    def test_nested_selection_is_structural(self, schema):
        expression = operation_expression(
            schema, 'query Q { user(id: "1") { friends { name } } }'
        )
        assert (
            "friends: z.array(z.object({\n"
            "      name: z.string().nullable(),\n"
            "    }).nullable()).nullable(),"
        ) in expression
        assert "role" not in expression

    def test_operations_keep_input_order(self, schema):
        output = make_generator(schema, "query B { tags } query A { tags }").generate()
        assert output.index("B_Schema") < output.index("A_Schema")

    def test_missing_root_type(self):
        schema = build_schema(parse_document("type Query { a: Int }"))
        with pytest.raises(GenerationError, match="no Mutation type"):
            make_generator(schema, "mutation M { a }").generate()


class TestFragments:
    """Tests for fragment expansion."""

    def test_named_fragment_is_expanded(self, schema):
        expression = operation_expression(
            schema,
            'query Q { user(id: "1") { ...UserFields } }\nfragment UserFields on User { id name }',
        )
        assert "id: z.string()," in expression
        assert "name: z.string().nullable()," in expression

    def test_nested_fragments(self, schema):
        expression = operation_expression(
            schema,
            'query Q { user(id: "1") { ...A } }\n'
            "fragment A on User { id ...B }\n"
            "fragment B on User { name }",
        )
        assert "name: z.string().nullable()," in expression

    def test_union_members_are_optional(self, schema):
        expression = operation_expression(
            schema,
            'query Q { search(term: "x") { __typename ... on User { name } ... on Post { title } } }',
        )
        assert "__typename: z.string()," in expression
        assert "name: z.string().nullable().optional()," in expression
        assert "title: z.string().optional()," in expression

    def test_interface_condition_on_implementing_object(self, schema):
        expression = operation_expression(
            schema, 'query Q { user(id: "1") { ... on Node { id } } }'
        )
        assert "id: z.string()," in expression
        assert ".optional()" not in expression

    def test_inline_fragment_without_condition(self, schema):
        expression = operation_expression(
            schema, 'query Q { user(id: "1") { ... @include(if: true) { name } } }'
        )
        assert "name: z.string().nullable()," in expression

    def test_unknown_fragment(self, schema):
        with pytest.raises(GenerationError, match="Unknown fragment Missing"):
            operation_expression(schema, 'query Q { user(id: "1") { ...Missing } }')

    def test_fragment_cycle(self, schema):
        with pytest.raises(GenerationError, match="Fragment cycle A -> B -> A"):
            operation_expression(
                schema,
                'query Q { user(id: "1") { ...A } }\n'
                "fragment A on User { ...B }\n"
                "fragment B on User { ...A }",
            )


class TestBestEffortGaps:
    """Tests for unresolved names in lenient and strict mode."""

    def test_unknown_field_degrades_to_any(self, schema, caplog):
        with caplog.at_level(logging.WARNING):
            expression = operation_expression(schema, 'query Q { user(id: "1") { nope } }')
        assert "nope: z.any()," in expression
        assert "Unknown field nope on type User" in caplog.text

    def test_unknown_field_in_strict_mode(self, schema):
        with pytest.raises(GenerationError, match="Unknown field nope"):
            operation_expression(schema, 'query Q { user(id: "1") { nope } }', strict=True)

    def test_composite_field_without_selection(self, schema, caplog):
        with caplog.at_level(logging.WARNING):
            expression = operation_expression(schema, 'query Q { user(id: "1") }')
        assert "user: z.any().nullable()," in expression
        assert "needs a selection set" in caplog.text


# =============================================================================
# Input type closure and declarations
# =============================================================================


class TestInputClosure:
    """Tests for types reachable from variables."""

    def test_closure_is_transitive_and_sorted(self, schema):
        generator = make_generator(
            schema, "query Q($f: UserFilter, $n: NewUser!, $id: ID!) { tags }"
        )
        assert [t.name for t in generator.input_types()] == [
            "DateTime",
            "NewUser",
            "Role",
            "UserFilter",
        ]

    def test_cyclic_inputs_terminate(self, schema):
        generator = make_generator(schema, "query Q($a: A) { tags }")
        assert [t.name for t in generator.input_types()] == ["A", "B"]
        output = generator.generate()
        assert output.count("export const A_Schema") == 1
        assert output.count("export const B_Schema") == 1

    def test_output_type_variable_is_dropped(self, schema, caplog):
        with caplog.at_level(logging.WARNING):
            generator = make_generator(schema, "query Q($u: User) { tags }")
            assert generator.input_types() == []
        assert "Output type User cannot be used as a variable type in Q" in caplog.text

    def test_output_type_variable_in_strict_mode(self, schema):
        generator = make_generator(schema, "query Q($u: [User!]) { tags }", strict=True)
        with pytest.raises(GenerationError, match="Output type User"):
            generator.input_types()

    def test_no_variables_no_declarations(self, schema):
        output = make_generator(schema, "query Q { tags }").generate()
        assert output.startswith('import { z } from "zod";\n')
        assert "Type definitions used in operations" not in output


class TestDeclarations:
    """Tests for rendered type declarations."""

    @pytest.fixture
    def output(self, schema):
        return make_generator(
            schema, "query Q($f: UserFilter, $n: NewUser!, $e: Empty) { tags }"
        ).generate()

    def test_header(self, output):
        assert output.startswith(
            'import { z } from "zod";\n\n// Type definitions used in operations\n'
        )

    def test_enum_declaration(self, output):
        assert 'export const Role_Schema = z.enum(["ADMIN", "USER"]);\n' in output
        assert "export type Role = z.infer<typeof Role_Schema>;\n" in output

    def test_empty_enum(self, output):
        assert "export const Empty_Schema = z.never();\n" in output

    def test_custom_scalar_declaration(self, output):
        assert "export const DateTime_Schema = z.any(); // Custom scalar\n" in output

    def test_lazy_input_object(self, output):
        assert (
            "export const NewUser_Schema: z.ZodType<any> = z.lazy(() => z.object({\n"
            "  name: z.string(),\n"
            "  friend: NewUser_Schema.nullable(),\n"
            "  tags: z.array(z.string()).nullable(),\n"
            "}));\n"
            "export type NewUser = z.infer<typeof NewUser_Schema>;\n"
        ) in output

    def test_references_to_declared_types(self, output):
        assert "  role: Role_Schema.nullable(),\n" in output
        assert "  createdAfter: DateTime_Schema.nullable(),\n" in output

    def test_description_becomes_jsdoc(self, output):
        assert "/** Filters users */\nexport const UserFilter_Schema" in output

    def test_declarations_precede_operations(self, output):
        assert output.index("UserFilter_Schema") < output.index("// Schema for Q operation")
