"""Tests for atrest.config."""

import json
import os

import pytest
import yaml

from atrest.config import Config
from atrest.config_schema import BackendType
from atrest.exceptions import ConfigurationError
from atrest.secrets import SecretsManager, YamlFileProvider


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("ATREST_"):
            monkeypatch.delenv(key)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.get("backend") == "local"
        assert config.get("root_path").endswith("storage")
        assert config.get("s3.signature_version") == "v4"

    def test_yaml_config_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"backend": "s3", "s3": {"bucket": "backups"}}, f)

        config = Config(config_file=config_path)
        assert config.get("backend") == "s3"
        assert config.get("s3.bucket") == "backups"
        # untouched defaults survive the merge
        assert config.get("s3.acl") == "private"

    def test_json_config_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.json")
        with open(config_path, "w") as f:
            json.dump({"root_path": tmp_dir}, f)

        config = Config(config_file=config_path)
        assert config.get("root_path") == tmp_dir

    def test_missing_file_uses_defaults(self, tmp_dir):
        config = Config(config_file=os.path.join(tmp_dir, "nope.yaml"))
        assert config.get("backend") == "local"

    def test_unparseable_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            f.write("backend: [unclosed")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            Config(config_file=config_path)

    def test_non_mapping_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            f.write("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            Config(config_file=config_path)

    def test_env_overrides_file(self, tmp_dir, monkeypatch):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"s3": {"bucket": "from-file"}}, f)

        monkeypatch.setenv("ATREST_S3__BUCKET", "from-env")
        config = Config(config_file=config_path)
        assert config.get("s3.bucket") == "from-env"

    def test_custom_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MYAPP_BACKEND", "memory")
        config = Config(env_prefix="MYAPP_")
        assert config.settings().backend is BackendType.MEMORY

    def test_unrelated_env_vars_ignored(self, monkeypatch):
        monkeypatch.setenv("ATREST_SECRET_CRYPTO__SECRET", "x")
        config = Config()
        assert config.get("secret_crypto") is None
        config.settings()

    def test_get_missing_key(self):
        config = Config()
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"

    def test_set(self):
        config = Config()
        config.set("crypto.salt", "pepper")
        assert config.get("crypto.salt") == "pepper"


class TestSettings:
    def test_env_values_are_coerced(self, monkeypatch):
        monkeypatch.setenv("ATREST_S3__SSL_ENABLED", "false")
        monkeypatch.setenv("ATREST_CRYPTO__ITERATIONS", "2000")
        settings = Config().settings()
        assert settings.s3.ssl_enabled is False
        assert settings.crypto.iterations == 2000

    def test_invalid_backend_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv("ATREST_BACKEND", "google")
        with pytest.raises(ConfigurationError, match="not implemented"):
            Config().settings()

    def test_s3_without_bucket_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv("ATREST_BACKEND", "s3")
        with pytest.raises(ConfigurationError, match="bucket"):
            Config().settings()

    def test_secrets_override_config(self, tmp_dir):
        secrets_path = os.path.join(tmp_dir, "secrets.yaml")
        with open(secrets_path, "w") as f:
            yaml.dump({"crypto": {"secret": "s3cr3t", "salt": "pepper"}, "s3": {"access_key_id": "AKID"}}, f)

        config = Config()
        config.set("crypto.secret", "from-config")
        settings = config.settings(secrets=SecretsManager([YamlFileProvider(secrets_path)]))
        assert settings.crypto.secret == "s3cr3t"
        assert settings.crypto.salt == "pepper"
        assert settings.s3.access_key_id == "AKID"
        # absent secrets leave config values alone
        assert settings.s3.secret_access_key == ""
