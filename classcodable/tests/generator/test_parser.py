"""Tests for declaration parser."""

import os

import pytest
from lark.exceptions import UnexpectedInput

from classcodable.generator import parse
from classcodable.generator.parser import ValidationError
from classcodable.generator.types import DeclKind, MemberKind, TypeKind

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def describe_parse_type():
    def parses_marked_class(expect):
        decls = parse(
            """
            @ClassCodable
            class Test {
                var test1: String = "Test1"
            }
        """
        )
        expect(len(decls)) == 1
        expect(decls[0].name) == "Test"
        expect(decls[0].kind) == DeclKind.CLASS
        expect(decls[0].markers[0].name) == "ClassCodable"
        expect(decls[0].markers[0].arguments) == []

    def parses_declaration_kinds(expect):
        decls = parse(
            """
            class A {}
            struct B {}
            enum C {}
            actor D {}
            protocol E {}
            extension A {}
        """
        )
        expect([d.kind for d in decls]) == [
            DeclKind.CLASS,
            DeclKind.STRUCT,
            DeclKind.ENUM,
            DeclKind.ACTOR,
            DeclKind.PROTOCOL,
            DeclKind.EXTENSION,
        ]

    def parses_modifiers_generics_and_inheritance(expect):
        decls = parse(
            """
            import Foundation

            @ClassCodable
            public final class Box<T: Codable>: NSObject, Sendable {
            }
        """
        )
        expect(decls[0].name) == "Box"
        expect(decls[0].members) == []

    def parses_file(expect):
        with open(f"{FILE_DIR}/person.swift") as f:
            decls = parse(f.read())
        expect([d.name for d in decls]) == ["Person", "Event", "Settings", "Point"]

    def fails_on_duplicate_type(expect):
        with pytest.raises(ValidationError):
            parse(
                """
                class A {}
                class A {}
            """
            )

    def allows_extensions_of_declared_type(expect):
        decls = parse(
            """
            class A {}
            extension A {}
        """
        )
        expect(len(decls)) == 2

    def fails_on_syntax_error(expect):
        with pytest.raises(UnexpectedInput):
            parse("class {")


def describe_parse_members():
    def parses_stored_properties(expect):
        decls = parse(
            """
            class Test {
                var test1: String = "Test1"
                let test2: Int
                var test3: String?
            }
        """
        )
        members = decls[0].members
        expect([m.name for m in members]) == ["test1", "test2", "test3"]
        expect([m.kind for m in members]) == [MemberKind.STORED_PROPERTY] * 3
        expect(members[0].initializer) == '"Test1"'
        expect(members[1].initializer) == None
        expect(members[2].type.name) == "String"
        expect(members[2].type.optional) == True

    def parses_marker_arguments(expect):
        decls = parse(
            """
            class Test {
                @CustomCodableKey("test_2") var test2: Int
                @Other(label: 5, .member) var test3: Int
            }
        """
        )
        key_marker = decls[0].members[0].markers[0]
        expect(key_marker.name) == "CustomCodableKey"
        expect(key_marker.arguments[0].label) == None
        expect(key_marker.arguments[0].value) == '"test_2"'

        other = decls[0].members[1].markers[0]
        expect(other.arguments[0].label) == "label"
        expect(other.arguments[0].value) == "5"
        expect(other.arguments[1].value) == ".member"

    def classifies_non_stored_members(expect):
        decls = parse(
            """
            class Test {
                static let shared = Test()
                var computed: Int {
                    return 1
                }
                var observed: Int = 0 {
                    didSet { print(observed) }
                }
                init(value: Int) {
                    self.observed = value
                }
                func run() -> Int { 1 }
                subscript(index: Int) -> Int { index }
                typealias ID = String
                enum Inner { case a, b }
                deinit {}
            }
        """
        )
        kinds = {m.name: m.kind for m in decls[0].members}
        expect(kinds["shared"]) == MemberKind.STATIC_PROPERTY
        expect(kinds["computed"]) == MemberKind.COMPUTED_PROPERTY
        expect(kinds["observed"]) == MemberKind.STORED_PROPERTY
        expect(kinds["init"]) == MemberKind.INITIALIZER
        expect(kinds["run"]) == MemberKind.METHOD
        expect(kinds["subscript"]) == MemberKind.SUBSCRIPT
        expect(kinds["ID"]) == MemberKind.TYPE_ALIAS
        expect(kinds["Inner"]) == MemberKind.NESTED_TYPE

    def strips_trailing_comments_from_defaults(expect):
        decls = parse(
            """
            class Test {
                var retries: Int = 3 // attempts
                var path: String = "a//b" /* kept */
            }
        """
        )
        expect(decls[0].members[0].initializer) == "3"
        expect(decls[0].members[1].initializer) == '"a//b"'

    def parses_untyped_default(expect):
        decls = parse("class A { var x = 1 }")
        expect(decls[0].members[0].name) == "x"
        expect(decls[0].members[0].type) == None
        expect(decls[0].members[0].initializer) == "1"

    def parses_members_after_bodies(expect):
        decls = parse(
            """
            class A {
                func run() -> Int { if true { return 1 }; return 0 }
                var x: Int
                var y: Int { 2 }
                var z: String = "z"
            }
        """
        )
        expect([m.name for m in decls[0].members]) == ["run", "x", "y", "z"]
        expect(decls[0].members[1].kind) == MemberKind.STORED_PROPERTY
        expect(decls[0].members[2].kind) == MemberKind.COMPUTED_PROPERTY
        expect(decls[0].members[3].initializer) == '"z"'

    def detects_observers_by_accessor_keyword(expect):
        decls = parse(
            """
            class A {
                var count: Int { didSetCount }
                var level: Int { willSet { print(newValue) } }
            }
        """
        )
        expect(decls[0].members[0].kind) == MemberKind.COMPUTED_PROPERTY
        expect(decls[0].members[1].kind) == MemberKind.STORED_PROPERTY


def describe_parse_types():
    def parses_collection_types(expect):
        decls = parse(
            """
            class Test {
                var list: [String]
                var map: [String: Int]?
                var generic: Set<Int>
                var nested: Foo.Bar
            }
        """
        )
        members = decls[0].members

        expect(members[0].type.kind) == TypeKind.ARRAY
        expect(str(members[0].type)) == "[String]"

        expect(members[1].type.kind) == TypeKind.DICTIONARY
        expect(members[1].type.optional) == True
        expect(str(members[1].type)) == "[String: Int]?"

        expect(members[2].type.name) == "Set"
        expect(str(members[2].type)) == "Set<Int>"

        expect(members[3].type.name) == "Foo.Bar"
