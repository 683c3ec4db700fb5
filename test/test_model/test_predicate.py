import re

import pytest

from hproxy.model.predicate import (
    ALWAYS, AllOf, AnyOf, Equals, FieldRef, Matches, Not, NotEquals, depends, depends_any, ne, when
)


def lookup(values):
    return lambda ref: values.get(ref.key)


class TestFieldRef:
    """Test parsing of dotted field addresses."""

    def test_parse_plain_key(self):
        ref = FieldRef.parse('outbound')
        assert ref.key == 'outbound'
        assert ref.section_type is None
        assert ref.section_id == 'current'

    def test_parse_singleton(self):
        ref = FieldRef.parse('config.routing_mode')
        assert ref == FieldRef('routing_mode', 'config', 'config')

    def test_parse_named_section(self):
        ref = FieldRef.parse('routing_node.node_1.enabled')
        assert ref == FieldRef('enabled', 'routing_node', 'node_1')

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            FieldRef.parse('a.b.c.d')


class TestClauses:
    """Test each clause kind against a plain lookup."""

    def test_equals(self):
        predicate = Equals(FieldRef('mode'), 'custom')
        assert predicate.evaluate(lookup({'mode': 'custom'}))
        assert not predicate.evaluate(lookup({'mode': 'global'}))

    def test_equals_missing_value_is_false(self):
        assert not Equals(FieldRef('mode'), '').evaluate(lookup({}))

    def test_not_equals_missing_value_is_true(self):
        assert NotEquals(FieldRef('mode'), 'custom').evaluate(lookup({}))

    def test_matches_regex(self):
        predicate = Matches(FieldRef('proxy_mode'), re.compile(r'^((?!redirect$).)+$'))
        assert predicate.evaluate(lookup({'proxy_mode': 'redirect_tproxy'}))
        assert not predicate.evaluate(lookup({'proxy_mode': 'redirect'}))
        assert not predicate.evaluate(lookup({}))

    def test_list_values_compare_as_text(self):
        predicate = Equals(FieldRef('outbound'), 'a b')
        assert predicate.evaluate(lookup({'outbound': ['a', 'b']}))

    def test_operators(self):
        a = Equals(FieldRef('a'), '1')
        b = Equals(FieldRef('b'), '1')
        values = lookup({'a': '1', 'b': '0'})

        assert isinstance(a & b, AllOf)
        assert isinstance(a | b, AnyOf)
        assert isinstance(~a, Not)
        assert not (a & b).evaluate(values)
        assert (a | b).evaluate(values)
        assert not (~a).evaluate(values)

    def test_always(self):
        assert ALWAYS.evaluate(lookup({}))


class TestDependsMapping:
    """Test the form-notation mapping builder."""

    def test_reverse_single_clause(self):
        predicate = depends({'routing_mode': 'custom', '!reverse': True})
        assert predicate.evaluate(lookup({'routing_mode': 'gfwlist'}))
        assert not predicate.evaluate(lookup({'routing_mode': 'custom'}))

    def test_reverse_negates_whole_conjunction(self):
        predicate = depends({'a': '1', 'b': '1', '!reverse': True})

        # NOT (a == 1 AND b == 1), not (a != 1 AND b != 1)
        assert predicate.evaluate(lookup({'a': '1', 'b': '0'}))
        assert predicate.evaluate(lookup({'a': '0', 'b': '0'}))
        assert not predicate.evaluate(lookup({'a': '1', 'b': '1'}))

    def test_conjunction(self):
        predicate = depends({'a': '1', 'b': '2'})
        assert predicate.evaluate(lookup({'a': '1', 'b': '2'}))
        assert not predicate.evaluate(lookup({'a': '1', 'b': '3'}))

    def test_negated_literal(self):
        predicate = depends({'outbound': ne('')})
        assert predicate.evaluate(lookup({'outbound': 'node_1'}))
        assert not predicate.evaluate(lookup({'outbound': ''}))

    def test_regex_value(self):
        predicate = depends({'routing_mode': re.compile(r'^((?!custom).)+$')})
        assert predicate.evaluate(lookup({'routing_mode': 'gfwlist'}))
        assert not predicate.evaluate(lookup({'routing_mode': 'custom'}))

    def test_empty_mapping_rejected(self):
        with pytest.raises(ValueError):
            depends({'!reverse': True})

    def test_depends_any_is_disjunction(self):
        predicate = depends_any({'mode': 'tun'}, {'mode': 'redirect_tun'})
        assert predicate.evaluate(lookup({'mode': 'tun'}))
        assert predicate.evaluate(lookup({'mode': 'redirect_tun'}))
        assert not predicate.evaluate(lookup({'mode': 'redirect'}))

    def test_when_shorthand(self):
        predicate = when('tcpip_stack', 'mixed', 'gvisor')
        assert predicate.evaluate(lookup({'tcpip_stack': 'gvisor'}))
        assert not predicate.evaluate(lookup({'tcpip_stack': 'system'}))

    def test_refs(self):
        predicate = depends({'config.routing_mode': 'custom', 'outbound': ''})
        refs = list(predicate.refs())
        assert FieldRef('routing_mode', 'config', 'config') in refs
        assert FieldRef('outbound') in refs
