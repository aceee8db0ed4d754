import json

from astronews.config import DEFAULT_CONFIG, Config


def test_defaults_without_file_or_env():
    config = Config(environ={})

    assert config.get("server.port") == 5000
    assert config.get("storage.all_category_slug") == "top"
    assert config.get("pagination.default_limit") == 20
    assert config.get("missing.key", "fallback") == "fallback"


def test_defaults_are_not_mutated():
    config = Config(environ={"ASTRONEWS_SERVER__PORT": "9000"})

    assert config.get("server.port") == 9000
    assert DEFAULT_CONFIG["server"]["port"] == 5000


def test_yaml_file_is_merged(tmp_path):
    path = tmp_path / "astronews.yaml"
    path.write_text("server:\n  port: 8080\nlogging:\n  level: DEBUG\n")

    config = Config(str(path), environ={})

    assert config.get("server.port") == 8080
    assert config.get("server.host") == "127.0.0.1"
    assert config.get("logging.level") == "DEBUG"


def test_json_file_is_merged(tmp_path):
    path = tmp_path / "astronews.json"
    path.write_text(json.dumps({"pagination": {"max_limit": 10}}))

    config = Config(str(path), environ={})

    assert config.get("pagination.max_limit") == 10
    assert config.get("pagination.default_limit") == 20


def test_unsupported_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "astronews.ini"
    path.write_text("[server]\nport = 1\n")

    config = Config(str(path), environ={})

    assert config.get("server.port") == 5000


def test_env_overrides_parse_json_values():
    config = Config(environ={
        "ASTRONEWS_STORAGE__SEED": "false",
        "ASTRONEWS_PAGINATION__DEFAULT_LIMIT": "5",
        "ASTRONEWS_SERVER__HOST": "0.0.0.0",
        "OTHER_SETTING": "ignored",
    })

    assert config.get("storage.seed") is False
    assert config.get("pagination.default_limit") == 5
    assert config.get("server.host") == "0.0.0.0"


def test_non_mapping_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "astronews.yaml"
    path.write_text("- server\n- port\n")

    config = Config(str(path), environ={"ASTRONEWS_SERVER__PORT": "7000"})

    assert config.get("server.port") == 7000
    assert config.get("server.host") == "127.0.0.1"
