import pytest

from hproxy.core.enums import ValidationStatus
from hproxy.core.exceptions import (
    ConflictingSelection, DuplicateIdentifier, EmptyRequiredField, InvalidFormat, ReadOnlyField
)
from hproxy.engine import SectionController
from hproxy.store import InMemoryConfigStore


class TestValidationOrder:
    """Test the ordered checks through the pipeline itself."""

    @pytest.fixture(autouse=True)
    def rule(self, custom_controller):
        self.c = custom_controller
        self.pipeline = custom_controller.pipeline
        self.rule_id = custom_controller.add('routing_rule', {'label': 'Rule'})

    def validate(self, key, value, section_type=None, section_id=None):
        section_type = section_type or 'routing_rule'
        descriptor = self.c.registry.field(section_type, key)
        return self.pipeline.validate(section_type, descriptor, section_id or self.rule_id,
                                      value, self.c.snapshot)

    def test_accepted_result(self):
        result = self.validate('port', ['80', '443'])
        assert result.status == ValidationStatus.ACCEPTED
        assert result.value == ['80', '443']

    def test_required_empty_rejected(self):
        result = self.validate('outbound', '')
        assert result.status == ValidationStatus.REJECTED
        assert isinstance(result.error, EmptyRequiredField)
        assert result.message == "Expecting: non-empty value"

    def test_optional_empty_accepted(self):
        assert self.validate('port', []).is_accepted
        assert self.validate('rewrite_ttl', '', section_type='dns_rule',
                             section_id=self.c.add('dns_rule', {'label': 'D'})).is_accepted

    def test_list_rejects_first_invalid_element(self):
        result = self.validate('port', ['80', '70000', 'abc'])
        assert isinstance(result.error, InvalidFormat)
        assert result.error.value == '70000'
        assert result.message == "Expecting: valid port value"

    def test_list_duplicates_rejected(self):
        result = self.validate('domain', ['example.com', 'example.com'])
        assert isinstance(result.error, DuplicateIdentifier)
        assert 'already exists' in result.message

    def test_port_range_normalized(self):
        result = self.validate('port_range', [':2000', '1000:'])
        assert result.value == ['0:2000', '1000:65535']

    def test_port_range_rejected(self):
        assert self.validate('port_range', ['2000:1000']).is_rejected
        assert self.validate('port_range', ['70000:1']).is_rejected

    def test_string_list_is_split(self):
        assert self.validate('ip_cidr', '10.0.0.0/8 192.168.1.1').value == ['10.0.0.0/8', '192.168.1.1']

    def test_choice_outside_options_rejected(self):
        result = self.validate('network', 'sctp')
        assert isinstance(result.error, InvalidFormat)

    def test_readonly_field(self):
        result = self.validate('mode', 'default')
        assert isinstance(result.error, ReadOnlyField)

    def test_flag_normalization(self):
        assert self.validate('invert', True).value == '1'
        assert self.validate('invert', 'false').value == '0'
        assert self.validate('invert', 0).value == '0'
        assert isinstance(self.validate('invert', 'maybe').error, InvalidFormat)

    def test_hidden_field_skipped(self):
        self.c.write('config', 'config', 'routing_mode', 'gfwlist')
        result = self.validate('port', ['not a port'])
        assert result.status == ValidationStatus.SKIPPED
        assert result.is_skipped

    def test_validation_has_no_side_effects(self):
        version = self.c.version
        self.validate('port', ['80'])
        assert self.c.version == version
        assert self.c.read('routing_rule', self.rule_id, 'port') == []


class TestExclusiveSentinel:
    """'any-out' cannot be combined with other outbounds."""

    @pytest.fixture(autouse=True)
    def dns_rule(self, custom_controller):
        self.c = custom_controller
        self.rule_id = custom_controller.add('dns_rule', {'label': 'D'})

    def test_any_alone_accepted(self):
        assert self.c.write('dns_rule', self.rule_id, 'outbound', ['any-out']).accepted

    def test_any_with_others_rejected(self):
        result = self.c.write('dns_rule', self.rule_id, 'outbound', ['any-out', 'direct-out'])
        assert isinstance(result.errors[0], ConflictingSelection)
        assert result.errors[0].message == "If 'any-out' is selected, uncheck others"

    def test_specific_values_accepted(self):
        assert self.c.write('dns_rule', self.rule_id, 'outbound', ['direct-out', 'block-out']).accepted


class TestUniqueness:
    """Unique keys are compared across sections of one type."""

    @pytest.fixture(autouse=True)
    def nodes(self, custom_controller):
        self.c = custom_controller
        self.a = custom_controller.add('routing_node', {'label': 'A'})
        self.b = custom_controller.add('routing_node', {'label': 'B'})

    def test_duplicate_label_rejected(self):
        result = self.c.rename('routing_node', self.b, 'A')
        assert isinstance(result.errors[0], DuplicateIdentifier)
        assert self.c.read('routing_node', self.b, 'label') == 'B'

    def test_own_label_accepted(self):
        assert self.c.rename('routing_node', self.a, 'A').accepted

    def test_disabled_section_may_share_until_enabled(self):
        assert self.c.apply('routing_node', self.b, {'enabled': '0', 'label': 'A'}).accepted

        result = self.c.write('routing_node', self.b, 'enabled', '1')
        assert not result.accepted
        assert result.errors[0].field == 'label'
        assert self.c.read('routing_node', self.b, 'enabled') == '0'

    def test_unique_reference_with_exemption(self):
        node = self.c.add('node', {'label': 'HK'})
        urltest = self.c.add('node', name='urltest')

        assert self.c.write('routing_node', self.a, 'node', node).accepted
        assert isinstance(self.c.write('routing_node', self.b, 'node', node).errors[0],
                          DuplicateIdentifier)

        assert self.c.write('routing_node', self.a, 'node', urltest).accepted
        assert self.c.write('routing_node', self.b, 'node', urltest).accepted

    def test_all_scope_for_nodes(self):
        self.c.add('node', {'label': 'Same'})
        with pytest.raises(DuplicateIdentifier):
            self.c.add('node', {'label': 'Same'})

    def test_unlabelled_section_compared_by_identifier(self, registry, settings):
        store = InMemoryConfigStore({
            'config': [{'.name': 'config', 'routing_mode': 'custom'}],
            'routing_node': [{'.name': 'alpha', 'enabled': '1'},
                             {'.name': 'beta', 'label': 'B', 'enabled': '1'}],
        })
        c = SectionController(registry, store, settings)
        c.load()

        result = c.rename('routing_node', 'beta', 'alpha')
        assert isinstance(result.errors[0], DuplicateIdentifier)
        assert c.read('routing_node', 'beta', 'label') == 'B'

        rule = c.add('routing_rule', {'label': 'R'})
        labels = [o.label for o in c.options('routing_rule', rule, 'outbound')]
        assert len(labels) == len(set(labels))


class TestFieldRules:
    """Field specific validators."""

    def test_routing_port(self, controller):
        assert controller.write('config', 'config', 'routing_port', 'all').accepted
        assert controller.write('config', 'config', 'routing_port', '80,443,1000:2000').accepted

        duplicate = controller.write('config', 'config', 'routing_port', '80,443,80')
        assert duplicate.errors[0].message == "Port 80 already exists"

        invalid = controller.write('config', 'config', 'routing_port', '80,http')
        assert isinstance(invalid.errors[0], InvalidFormat)
        assert controller.read('config', 'config', 'routing_port') == '80,443,1000:2000'

    def test_dns_server_follows_ipv6_support(self, controller):
        assert controller.write('config', 'config', 'dns_server', 'wan').accepted
        assert controller.write('config', 'config', 'dns_server', '2001:4860:4860::8888').accepted

        controller.write('config', 'config', 'ipv6_support', '0')
        result = controller.write('config', 'config', 'dns_server', '2001:4860:4860::8844')
        assert isinstance(result.errors[0], InvalidFormat)
        assert not controller.write('config', 'config', 'dns_server', 'dns.google').accepted

    def test_china_dns_servers(self, controller):
        write = lambda value: controller.write('config', 'config', 'china_dns_server', value)

        assert write(['wan', '223.5.5.5#53']).accepted
        assert not write(['223.5.5.5#99999']).accepted
        assert not write(['223.5.5.5#53#1']).accepted
        assert not write(['wan', '223.5.5.5', '119.29.29.29']).accepted

    def test_china_dns_v2_accepts_more_servers(self, registry, store):
        from hproxy.config import EngineSettings

        controller = SectionController(registry, store, EngineSettings(
            features=frozenset({'hp_has_chinadns_ng', 'hp_has_chinadns_ng_v2'})))
        controller.load()
        result = controller.write('config', 'config', 'china_dns_server',
                                  ['wan', '223.5.5.5', '119.29.29.29'])
        assert result.accepted

    def test_domain_blob(self, controller):
        result = controller.write('control', 'control', '_proxy_domain_list', 'example.com\n\nfoo.org\n')
        assert result.accepted
        assert controller.read('control', 'control', '_proxy_domain_list') == 'example.com\n\nfoo.org\n'

        invalid = controller.write('control', 'control', '_direct_domain_list', 'ok.com\nnot a domain')
        assert invalid.errors[0].value == 'not a domain'

    def test_write_feature(self, custom_controller, registry, store):
        assert custom_controller.write('experimental', 'experimental', 'nginx_support', '1').accepted

        from hproxy.config import EngineSettings

        bare = SectionController(registry, store, EngineSettings())
        bare.load()
        bare.write('config', 'config', 'routing_mode', 'custom')
        result = bare.write('experimental', 'experimental', 'nginx_support', '0')
        assert isinstance(result.errors[0], ReadOnlyField)
