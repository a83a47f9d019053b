"""Tests for configuration management."""
import dataclasses
import json

import pytest
from config import Args, ConfigManager, ConfigPresets, get_config_manager, load_config
from config import config_manager as config_manager_module
from utils.exceptions import ConfigurationError


class TestArgs:
    """Tests for Args."""
    
    def test_defaults_are_valid(self):
        """Test the default configuration validates."""
        args = Args()
        assert args.validate() is args
        assert args.bagging == 1.0
        assert args.nbase == 1
        assert args.ensemble is False
    
    def test_immutable(self):
        """Test configuration values cannot be reassigned."""
        args = Args()
        with pytest.raises(dataclasses.FrozenInstanceError):
            args.random_tree = True
    
    def test_replace_returns_new_value(self):
        """Test replace leaves the original untouched."""
        args = Args(nbase=2)
        changed = args.replace(random_tree=True)
        assert changed.random_tree is True
        assert args.random_tree is False
        assert changed.nbase == 2
    
    @pytest.mark.parametrize("changes", [
        {'nbase': 0},
        {'nbase': -3},
        {'bagging': -0.1},
        {'dim': 0},
        {'lr': 0.0},
        {'thread': 0},
        {'lr': 'fast'},
        {'seed': 'x'},
        {'seed': 1.5},
        {'loss': 'bagging'},
        {'loss': 'unknown'},
        {'log_level': 'LOUD'},
    ])
    def test_invalid_values(self, changes):
        """Test invalid settings are configuration errors."""
        with pytest.raises(ConfigurationError):
            Args(**changes).validate()
    
    def test_dropout_above_one_means_disabled(self):
        """Test bagging probabilities above 1 are accepted."""
        assert Args(ensemble=True, nbase=3, bagging=2.0).validate().bagging == 2.0
    
    def test_from_dict_rejects_unknown_keys(self):
        """Test typos in configuration keys are reported."""
        with pytest.raises(ConfigurationError):
            Args.from_dict({'nbases': 3})
    
    def test_yaml_round_trip(self, tmp_path):
        """Test saving and loading config as YAML."""
        args = Args(loss="ova", ensemble=True, nbase=4, bagging=0.25)
        path = tmp_path / "args.yaml"
        args.to_yaml(str(path))
        assert Args.from_yaml(str(path)) == args
    
    def test_json_round_trip(self, tmp_path):
        """Test saving and loading config as JSON."""
        args = Args(nbase=2, dim=32)
        path = tmp_path / "args.json"
        args.to_json(str(path))
        assert Args.from_json(str(path)) == args


class TestConfigManager:
    """Tests for ConfigManager."""
    
    def test_later_sources_override(self, tmp_path):
        """Test file values override defaults and dict values override files."""
        path = tmp_path / "run.json"
        path.write_text(json.dumps({'nbase': 4, 'ensemble': True}))
        
        manager = ConfigManager({'nbase': 2, 'dim': 8})
        manager.load_from_file(str(path))
        manager.load_from_dict({'bagging': 0.5})
        args = manager.build_args()
        
        assert args.nbase == 4
        assert args.dim == 8
        assert args.bagging == 0.5
    
    def test_yaml_file(self, tmp_path):
        """Test loading YAML files."""
        path = tmp_path / "run.yaml"
        path.write_text("loss: ova\nensemble: true\nnbase: 3\n")
        
        manager = ConfigManager()
        manager.load_from_file(str(path))
        
        assert manager.build_args().loss == "ova"
    
    def test_missing_file(self, tmp_path):
        """Test a missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(tmp_path / "missing.yaml"))
    
    def test_unsupported_format(self, tmp_path):
        """Test unknown file types are rejected."""
        path = tmp_path / "run.ini"
        path.write_text("[run]\n")
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(path))
    
    def test_env_values_are_typed(self, monkeypatch):
        """Test environment variables are parsed as JSON values."""
        monkeypatch.setenv("LABELBAG_NBASE", "6")
        monkeypatch.setenv("LABELBAG_ENSEMBLE", "true")
        monkeypatch.setenv("LABELBAG_LOSS", "ova")
        
        manager = ConfigManager()
        manager.load_from_env()
        args = manager.build_args()
        
        assert args.nbase == 6
        assert args.ensemble is True
        assert args.loss == "ova"
    
    def test_wrong_typed_env_value(self, monkeypatch):
        """Test a non-numeric learning rate from the environment is a configuration error."""
        monkeypatch.setenv("LABELBAG_LR", "fast")
        
        manager = ConfigManager()
        manager.load_from_env()
        
        with pytest.raises(ConfigurationError):
            manager.build_args()
    
    def test_build_args_validates(self):
        """Test built configurations are validated."""
        manager = ConfigManager({'nbase': 0})
        with pytest.raises(ConfigurationError):
            manager.build_args()
    
    def test_save_to_file(self, tmp_path):
        """Test the collected values can be written and read back."""
        manager = ConfigManager({'nbase': 5, 'ensemble': True})
        path = tmp_path / "out" / "run.yaml"
        manager.save_to_file(str(path))
        
        reloaded = ConfigManager()
        reloaded.load_from_file(str(path))
        assert reloaded.build_args().nbase == 5


class TestConfigPresets:
    """Tests for presets."""
    
    @pytest.mark.parametrize("name", ['single_softmax', 'bagging_softmax', 'bagging_ova'])
    def test_presets_are_valid(self, name):
        """Test every preset builds a valid configuration."""
        args = ConfigManager(ConfigPresets.get_preset(name)).build_args()
        assert args.nbase > 0
    
    def test_unknown_preset(self):
        """Test unknown preset names raise."""
        with pytest.raises(ValueError):
            ConfigPresets.get_preset('nope')


class TestGlobalConfig:
    """Tests for the process-wide configuration manager."""
    
    @pytest.fixture(autouse=True)
    def fresh_global_manager(self, monkeypatch):
        monkeypatch.setattr(config_manager_module, '_global_config_manager', None)
    
    def test_get_config_manager_is_shared(self):
        """Test the same manager is returned on every call."""
        assert get_config_manager() is get_config_manager()
    
    def test_load_config(self, tmp_path):
        """Test loading a file through the global manager."""
        path = tmp_path / "run.yaml"
        path.write_text("ensemble: true\nnbase: 4\nbagging: 0.5\n")
        
        args = load_config(str(path))
        
        assert args.ensemble is True
        assert args.nbase == 4
        assert get_config_manager().get('bagging') == 0.5
    
    def test_load_config_invalid(self, tmp_path):
        """Test invalid file contents raise configuration errors."""
        path = tmp_path / "run.json"
        path.write_text('{"nbase": 0}')
        with pytest.raises(ConfigurationError):
            load_config(str(path))
