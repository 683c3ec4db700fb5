import pytest
import yaml

from hproxy.store import ConfigStoreFactory, InMemoryConfigStore
from hproxy.store.yaml_storage import YamlConfigStore


SAMPLE = {
    'config': [{'.name': 'config', 'routing_mode': 'custom'}],
    'routing_node': [
        {'.name': 'hk', 'label': 'HK', 'enabled': '1'},
        {'.name': 'jp', 'label': 'JP', 'enabled': '0'},
    ],
}


class TestInMemoryConfigStore:
    """Test the in-memory store."""

    def setup_method(self):
        self.store = InMemoryConfigStore(SAMPLE)

    def test_load_keeps_order(self):
        sections = self.store.load('routing_node')
        assert [s.section_id for s in sections] == ['hk', 'jp']
        assert sections[0].values == {'label': 'HK', 'enabled': '1'}
        assert self.store.load('dns_rule') == []

    def test_loaded_sections_are_copies(self):
        section = self.store.load('routing_node')[0]
        section.values['label'] = 'changed'
        assert self.store.get('routing_node', 'hk', 'label') == 'HK'

    def test_set_and_remove_value(self):
        self.store.set('routing_node', 'hk', 'outbound', 'jp')
        assert self.store.get('routing_node', 'hk', 'outbound') == 'jp'

        self.store.set('routing_node', 'hk', 'outbound', None)
        assert self.store.get('routing_node', 'hk', 'outbound') is None

    def test_set_on_missing_section(self):
        with pytest.raises(KeyError):
            self.store.set('routing_node', 'missing', 'label', 'x')

    def test_add_and_delete(self):
        self.store.add_section('routing_node', 'sg', {'label': 'SG'})
        assert self.store.sections_of_type('routing_node') == ['hk', 'jp', 'sg']

        with pytest.raises(ValueError):
            self.store.add_section('routing_node', 'sg')

        assert self.store.delete_section('routing_node', 'sg')
        assert not self.store.delete_section('routing_node', 'sg')

    def test_reorder(self):
        self.store.reorder('routing_node', ['jp', 'hk'])
        assert self.store.sections_of_type('routing_node') == ['jp', 'hk']

        with pytest.raises(ValueError):
            self.store.reorder('routing_node', ['jp'])

    def test_export(self):
        assert self.store.to_dict() == SAMPLE

    def test_rollback_restores_last_commit(self):
        self.store.set('routing_node', 'hk', 'label', 'Hong Kong')
        self.store.commit()

        self.store.add_section('routing_node', 'sg', {'label': 'SG'})
        self.store.delete_section('routing_node', 'jp')
        self.store.rollback()

        assert self.store.sections_of_type('routing_node') == ['hk', 'jp']
        assert self.store.get('routing_node', 'hk', 'label') == 'Hong Kong'


class TestYamlConfigStore:
    """Test the YAML file store."""

    def test_reads_existing_file(self, tmp_path):
        path = tmp_path / "hproxy.yaml"
        path.write_text(yaml.safe_dump(SAMPLE))

        store = YamlConfigStore(str(path))
        assert store.sections_of_type('routing_node') == ['hk', 'jp']

    def test_missing_file_is_empty(self, tmp_path):
        store = YamlConfigStore(str(tmp_path / "absent.yaml"))
        assert store.load('config') == []

    def test_commit_writes_file(self, tmp_path):
        path = tmp_path / "nested" / "hproxy.yaml"
        store = YamlConfigStore(str(path))
        store.add_section('config', 'config', {'routing_mode': 'gfwlist'})
        assert not path.exists()

        store.commit()
        data = yaml.safe_load(path.read_text())
        assert data == {'config': [{'.name': 'config', 'routing_mode': 'gfwlist'}]}

    def test_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            YamlConfigStore(str(path))

    def test_controller_round_trip(self, tmp_path, registry, settings):
        from hproxy.engine import SectionController

        path = tmp_path / "hproxy.yaml"
        controller = SectionController(registry, YamlConfigStore(str(path)), settings)
        controller.load()
        controller.write('config', 'config', 'routing_mode', 'custom')
        node = controller.add('routing_node', {'label': 'Saved'})

        reopened = SectionController(registry, YamlConfigStore(str(path)), settings)
        reopened.load()
        assert reopened.read('routing_node', node, 'label') == 'Saved'
        assert reopened.read('config', 'config', 'routing_mode') == 'custom'


class TestConfigStoreFactory:

    @pytest.mark.parametrize("backend", ['memory', 'test', 'MEMORY'])
    def test_in_memory_backends(self, backend):
        assert isinstance(ConfigStoreFactory.create(backend), InMemoryConfigStore)

    def test_yaml_backend(self, tmp_path):
        store = ConfigStoreFactory.create('yaml', str(tmp_path / "c.yaml"))
        assert isinstance(store, YamlConfigStore)

    def test_yaml_requires_path(self):
        with pytest.raises(ValueError):
            ConfigStoreFactory.create('yaml')

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            ConfigStoreFactory.create('sqlite')

    def test_create_in_memory(self):
        assert isinstance(ConfigStoreFactory.create_in_memory(), InMemoryConfigStore)
