"""Unit tests for configuration loading."""

import pytest
import yaml
from boorukit.errors import ConfigError
from boorukit.utils.config_loader import ConfigLoader, get_credentials, load_config


def write_config(path, config):
    path.write_text(yaml.safe_dump(config), encoding='utf-8')
    return path


class TestConfigLoader:
    """Test cases for ConfigLoader class."""

    def test_load_valid_config(self, temp_dir, sample_config):
        """Test loading a complete configuration file."""
        path = write_config(temp_dir / 'config.yaml', sample_config)

        config = ConfigLoader(str(path)).load()

        assert config['http']['timeout'] == 15
        assert config['rate_limit']['requests'] == 5
        assert config['cache']['max_entries'] == 50

    def test_falls_back_to_example(self, temp_dir, sample_config):
        """Test the .example file is used when the config file is missing."""
        write_config(temp_dir / 'config.yaml.example', sample_config)

        loader = ConfigLoader(str(temp_dir / 'config.yaml'))
        config = loader.load()

        assert config['http']['user_agent'] == 'boorukit-tests/1.0'
        assert loader.config_path.name == 'config.yaml.example'

    def test_missing_file(self, temp_dir):
        """Test a missing file without example raises ConfigError."""
        with pytest.raises(ConfigError):
            ConfigLoader(str(temp_dir / 'nope.yaml')).load()

    def test_invalid_yaml(self, temp_dir):
        """Test malformed YAML raises ConfigError."""
        path = temp_dir / 'config.yaml'
        path.write_text("http: [unclosed", encoding='utf-8')

        with pytest.raises(ConfigError):
            ConfigLoader(str(path)).load()

    def test_missing_http_section(self, temp_dir, sample_config):
        """Test the http section is required."""
        del sample_config['http']
        path = write_config(temp_dir / 'config.yaml', sample_config)

        with pytest.raises(ConfigError, match="http"):
            ConfigLoader(str(path)).load()

    @pytest.mark.parametrize('section,key,value', [
        ('rate_limit', 'requests', 0),
        ('rate_limit', 'per_seconds', -1),
        ('cache', 'max_entries', 0),
        ('http', 'timeout', 'fast'),
        ('retry', 'max_retries', -1),
    ])
    def test_invalid_values(self, temp_dir, sample_config, section, key, value):
        """Test non-positive limits are rejected."""
        sample_config[section][key] = value
        path = write_config(temp_dir / 'config.yaml', sample_config)

        with pytest.raises(ConfigError, match=key):
            ConfigLoader(str(path)).load()

    def test_env_substitution(self, temp_dir, sample_config, monkeypatch):
        """Test ${VAR} and ${VAR:default} substitution."""
        monkeypatch.setenv('BOORUKIT_TEST_KEY', 'secret-from-env')
        monkeypatch.delenv('BOORUKIT_TEST_MISSING', raising=False)
        sample_config['credentials']['gelbooru'] = {
            'api_key': '${BOORUKIT_TEST_KEY}',
            'user_id': '${BOORUKIT_TEST_MISSING:42}',
        }
        path = write_config(temp_dir / 'config.yaml', sample_config)

        config = ConfigLoader(str(path)).load()

        assert config['credentials']['gelbooru']['api_key'] == 'secret-from-env'
        assert config['credentials']['gelbooru']['user_id'] == '42'

    def test_unset_var_without_default_is_kept(self, temp_dir, sample_config, monkeypatch):
        """Test unresolved placeholders are left in place."""
        monkeypatch.delenv('BOORUKIT_TEST_UNSET', raising=False)
        sample_config['credentials']['rule34'] = {
            'api_key': '${BOORUKIT_TEST_UNSET}',
            'user_id': '1',
        }
        path = write_config(temp_dir / 'config.yaml', sample_config)

        config = ConfigLoader(str(path)).load()

        assert config['credentials']['rule34']['api_key'] == '${BOORUKIT_TEST_UNSET}'
        assert get_credentials(config, 'rule34') is None

    def test_dotenv_file_is_loaded(self, temp_dir, sample_config, monkeypatch):
        """Test variables from a .env file feed substitution."""
        # setenv first so monkeypatch removes the variable dotenv sets
        monkeypatch.setenv('BOORUKIT_DOTENV_KEY', 'x')
        monkeypatch.delenv('BOORUKIT_DOTENV_KEY')
        env_file = temp_dir / '.env'
        env_file.write_text("BOORUKIT_DOTENV_KEY=from-dotenv\n", encoding='utf-8')
        sample_config['credentials']['gelbooru']['api_key'] = '${BOORUKIT_DOTENV_KEY}'
        path = write_config(temp_dir / 'config.yaml', sample_config)

        config = ConfigLoader(str(path), env_file=str(env_file)).load()

        assert config['credentials']['gelbooru']['api_key'] == 'from-dotenv'

    def test_dotenv_found_from_working_directory(self, temp_dir, sample_config, monkeypatch):
        """Test the default loader picks up .env and config from the working directory."""
        monkeypatch.setenv('BOORUKIT_CWD_KEY', 'x')
        monkeypatch.delenv('BOORUKIT_CWD_KEY')
        (temp_dir / '.env').write_text("BOORUKIT_CWD_KEY=from-cwd-dotenv\n", encoding='utf-8')
        (temp_dir / 'config').mkdir()
        sample_config['credentials']['gelbooru']['api_key'] = '${BOORUKIT_CWD_KEY}'
        write_config(temp_dir / 'config' / 'config.yaml', sample_config)
        monkeypatch.chdir(temp_dir)

        config = ConfigLoader().load()

        assert config['credentials']['gelbooru']['api_key'] == 'from-cwd-dotenv'

    def test_existing_environment_wins_over_dotenv(self, temp_dir, sample_config, monkeypatch):
        """Test .env entries never override variables already set."""
        monkeypatch.setenv('BOORUKIT_CWD_KEY', 'from-environment')
        (temp_dir / '.env').write_text("BOORUKIT_CWD_KEY=from-cwd-dotenv\n", encoding='utf-8')
        sample_config['credentials']['gelbooru']['api_key'] = '${BOORUKIT_CWD_KEY}'
        path = write_config(temp_dir / 'config.yaml', sample_config)
        monkeypatch.chdir(temp_dir)

        config = ConfigLoader(str(path)).load()

        assert config['credentials']['gelbooru']['api_key'] == 'from-environment'

    def test_load_config_helper(self, temp_dir, sample_config):
        """Test the convenience function."""
        path = write_config(temp_dir / 'config.yaml', sample_config)
        assert load_config(str(path))['retry']['max_retries'] == 2


class TestGetCredentials:
    """Test cases for get_credentials."""

    def test_configured_backend(self, sample_config):
        """Test credentials are returned as strings."""
        creds = get_credentials(sample_config, 'gelbooru')
        assert creds == {'api_key': 'test_gelbooru_key', 'user_id': '1234'}

    def test_unconfigured_backend(self, sample_config):
        """Test a backend without credentials."""
        assert get_credentials(sample_config, 'danbooru') is None

    def test_no_credentials_section(self):
        """Test a config without credentials at all."""
        assert get_credentials({'http': {}}, 'gelbooru') is None
