from hproxy.engine import DependencyEvaluator
from hproxy.model.field import text
from hproxy.model.predicate import depends
from hproxy.model.registry import SectionTypeRegistry, SectionTypeSpec
from hproxy.model.section import ConfigSnapshot, Section


def visible(controller, section_type, section_id=None):
    return controller.visible_fields(section_type, section_id or section_type)


class TestReverseVisibility:
    """Fields hidden in custom routing mode use a reversed predicate."""

    def test_visible_unless_custom(self, controller):
        assert controller.is_visible('config', 'config', 'main_node')
        assert controller.is_visible('config', 'config', 'dns_server')

        controller.write('config', 'config', 'routing_mode', 'custom')

        assert not controller.is_visible('config', 'config', 'main_node')
        assert not controller.is_visible('config', 'config', 'dns_server')
        assert controller.is_visible('config', 'config', 'routing_mode')

    def test_domain_lists_follow_routing_mode(self, controller):
        assert controller.is_visible('control', 'control', '_proxy_domain_list')
        controller.write('config', 'config', 'routing_mode', 'custom')
        assert not controller.is_visible('control', 'control', '_proxy_domain_list')


class TestSectionVisibility:
    """Section types shown only in custom routing mode."""

    def test_hidden_section_type_has_no_visible_fields(self, controller):
        assert visible(controller, 'routing') == []
        assert visible(controller, 'dns') == []

    def test_custom_routing_shows_section(self, custom_controller):
        assert visible(custom_controller, 'routing') == [
            'udp_timeout', 'bypass_cn_traffic', 'sniff_override', 'default_outbound'
        ]


class TestTransitiveVisibility:
    """A field depending on a hidden field is hidden as well."""

    def test_chain_through_hidden_field(self, custom_controller):
        c = custom_controller
        c.write('config', 'config', 'proxy_mode', 'tun')
        assert c.is_visible('routing', 'routing', 'tcpip_stack')
        assert not c.is_visible('routing', 'routing', 'endpoint_independent_nat')

        c.write('routing', 'routing', 'tcpip_stack', 'gvisor')
        assert c.is_visible('routing', 'routing', 'endpoint_independent_nat')

        c.write('config', 'config', 'proxy_mode', 'redirect_tproxy')
        assert not c.is_visible('routing', 'routing', 'tcpip_stack')
        assert c.read('routing', 'routing', 'tcpip_stack') == 'gvisor'
        assert not c.is_visible('routing', 'routing', 'endpoint_independent_nat')

    def test_regex_dependency(self, controller):
        assert controller.is_visible('config', 'config', 'main_udp_node')
        controller.write('config', 'config', 'proxy_mode', 'redirect')
        assert not controller.is_visible('config', 'config', 'main_udp_node')

    def test_multi_clause_dependency(self, controller):
        assert not controller.is_visible('control', 'control', 'lan_direct_ipv6_ips')

        controller.write('control', 'control', 'lan_proxy_mode', 'except_listed')
        assert controller.is_visible('control', 'control', 'lan_direct_ipv6_ips')
        assert controller.is_visible('control', 'control', 'lan_direct_ipv4_ips')

        controller.write('config', 'config', 'ipv6_support', '0')
        assert not controller.is_visible('control', 'control', 'lan_direct_ipv6_ips')
        assert controller.is_visible('control', 'control', 'lan_direct_ipv4_ips')

    def test_sibling_field_in_same_section(self, custom_controller):
        c = custom_controller
        a = c.add('routing_node', {'label': 'A'})
        b = c.add('routing_node', {'label': 'B'})
        assert c.is_visible('routing_node', a, 'bind_interface')

        c.write('routing_node', a, 'outbound', b)
        assert not c.is_visible('routing_node', a, 'bind_interface')
        assert c.is_visible('routing_node', b, 'bind_interface')


class TestFeatureGating:
    """Fields gated on a builtin feature are never visible without it."""

    def test_missing_feature_hides_field(self, registry):
        snapshot = ConfigSnapshot({'config': [Section('config', 'config', {})]})
        evaluator = DependencyEvaluator(registry)
        descriptor = registry.field('config', 'china_dns_server')

        assert not evaluator.is_visible('config', descriptor, snapshot, 'config')

        snapshot.features = frozenset({'hp_has_chinadns_ng'})
        assert evaluator.is_visible('config', descriptor, snapshot, 'config')


class TestSyntheticSnapshot:
    """The evaluator works on any snapshot, no controller needed."""

    def test_default_values_feed_predicates(self, registry):
        evaluator = DependencyEvaluator(registry)
        snapshot = ConfigSnapshot({
            'config': [Section('config', 'config', {'routing_mode': 'custom'})],
            'dns': [Section('dns', 'dns', {})],
        })

        # disable_cache defaults to '0', which shows the cache options.
        assert evaluator.is_visible('dns', registry.field('dns', 'disable_cache_expire'), snapshot, 'dns')

        snapshot.set_value('dns', 'dns', 'disable_cache', '1')
        assert not evaluator.is_visible('dns', registry.field('dns', 'disable_cache_expire'), snapshot, 'dns')

    def test_missing_section_reads_as_absent(self, registry):
        evaluator = DependencyEvaluator(registry)
        snapshot = ConfigSnapshot({'routing': [Section('routing', 'routing', {})]})

        # No config section: routing_mode is absent, so the custom-only section is hidden.
        assert not evaluator.is_section_visible('routing', snapshot, 'routing')

    def test_dependency_cycle_does_not_recurse(self):
        spec = SectionTypeSpec('sample', (
            text('a', depends=depends({'b': '1'})),
            text('b', depends=depends({'a': '1'})),
        ), singleton=True)
        registry = SectionTypeRegistry([spec])
        snapshot = ConfigSnapshot({'sample': [Section('sample', 'sample', {'a': '1', 'b': '1'})]})
        evaluator = DependencyEvaluator(registry)

        assert not evaluator.is_visible('sample', registry.field('sample', 'a'), snapshot, 'sample')
        assert not evaluator.is_visible('sample', registry.field('sample', 'b'), snapshot, 'sample')

    def test_visibility_map(self, registry):
        evaluator = DependencyEvaluator(registry)
        snapshot = ConfigSnapshot({'config': [Section('config', 'config', {'routing_mode': 'custom'})]})
        result = evaluator.visibility_map(snapshot)

        assert result[('config', 'config', 'routing_mode')]
        assert not result[('config', 'config', 'main_node')]
