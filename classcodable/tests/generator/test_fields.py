"""Tests for field extraction."""

from classcodable.generator import extract_fields
from classcodable.generator.fields import override_key
from classcodable.generator.types import Marker, MarkerArg, MemberDecl, MemberKind, TypeRef


def _stored(name, type_name="String", optional=False, initializer=None, markers=None):
    return MemberDecl(
        kind=MemberKind.STORED_PROPERTY,
        name=name,
        type=TypeRef(name=type_name, optional=optional),
        initializer=initializer,
        markers=markers or [],
    )


def _key(*values):
    return Marker(name="CustomCodableKey", arguments=[MarkerArg(label=None, value=v) for v in values])


def describe_extract_fields():
    def keeps_declaration_order(expect):
        fields = extract_fields([_stored("b"), _stored("a"), _stored("c")])
        expect([f.name for f in fields]) == ["b", "a", "c"]

    def captures_type_default_and_optionality(expect):
        fields = extract_fields(
            [
                _stored("test1", initializer='"Test1"'),
                _stored("test2", type_name="Int"),
                _stored("test3", optional=True),
            ]
        )
        expect(fields[0].default_expression) == '"Test1"'
        expect(fields[0].is_optional) == False
        expect(fields[1].declared_type.name) == "Int"
        expect(fields[1].default_expression) == None
        expect(fields[2].is_optional) == True

    def skips_members_that_are_not_stored_properties(expect):
        members = [
            _stored("kept"),
            MemberDecl(kind=MemberKind.COMPUTED_PROPERTY, name="computed", type=TypeRef(name="Int")),
            MemberDecl(kind=MemberKind.STATIC_PROPERTY, name="shared", type=TypeRef(name="Int")),
            MemberDecl(kind=MemberKind.METHOD, name="run"),
            MemberDecl(kind=MemberKind.INITIALIZER, name="init"),
            MemberDecl(kind=MemberKind.NESTED_TYPE, name="Inner"),
        ]
        expect([f.name for f in extract_fields(members)]) == ["kept"]

    def skips_properties_without_type_annotation(expect):
        members = [
            MemberDecl(kind=MemberKind.STORED_PROPERTY, name="inferred", initializer="1"),
            _stored("annotated"),
        ]
        expect([f.name for f in extract_fields(members)]) == ["annotated"]

    def returns_empty_list_for_no_members(expect):
        expect(extract_fields([])) == []

    def records_override_key(expect):
        fields = extract_fields([_stored("test2", markers=[_key('"test_2"')]), _stored("test3")])
        expect(fields[0].override_key) == "test_2"
        expect(fields[0].serialized_key) == "test_2"
        expect(fields[1].override_key) == None
        expect(fields[1].serialized_key) == "test3"


def describe_override_key():
    def ignores_unrelated_markers(expect):
        expect(override_key([Marker(name="Published")])) == None

    def ignores_marker_with_wrong_argument_count(expect):
        expect(override_key([_key()])) == None
        expect(override_key([_key('"a"', '"b"')])) == None

    def first_single_argument_marker_wins(expect):
        expect(override_key([_key(), _key('"first"'), _key('"second"')])) == "first"

    def unescapes_string_literals(expect):
        expect(override_key([_key('"say \\"hi\\""')])) == 'say "hi"'

    def unescapes_control_and_unicode_escapes(expect):
        expect(override_key([_key('"a\\tb\\n"')])) == "a\tb\n"
        expect(override_key([_key('"\\u{e9}t\\0"')])) == "\u00e9t\0"

    def keeps_non_string_literals_as_written(expect):
        expect(override_key([_key("42")])) == "42"

    def allows_empty_key(expect):
        expect(override_key([_key('""')])) == ""
