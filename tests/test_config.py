from pathlib import Path

from browser_relay.config import load_config


def test_defaults_match_fixed_destination_and_viewport(tmp_path: Path) -> None:
    config = load_config(env_file=tmp_path / "missing.env")

    assert config.browser.start_url == "https://www.youtube.com"
    assert (config.browser.viewport_width, config.browser.viewport_height) == (1280, 800)
    assert config.browser.headless is True
    assert config.llm.provider == "gemini"
    assert config.llm.model is None
    assert config.history.table == "historyagents"


def test_load_config_reads_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "BROWSER_RELAY_LLM__PROVIDER=mock",
                "BROWSER_RELAY_BROWSER__HEADLESS=false",
                "BROWSER_RELAY_HISTORY__BACKEND=supabase",
                "BROWSER_RELAY_SERVER__PORT=4000",
            ]
        )
    )

    config = load_config(env_file=env_path)

    assert config.llm.provider == "mock"
    assert config.browser.headless is False
    assert config.history.backend == "supabase"
    assert config.server.port == 4000


def test_load_config_prioritises_overrides(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("BROWSER_RELAY_LLM__PROVIDER=mock\n")

    config_path = tmp_path / "relay.yaml"
    config_path.write_text(
        "\n".join(
            [
                "browser:",
                "  start_url: https://example.com",
                "server:",
                "  port: 5000",
            ]
        )
    )

    config = load_config(config_path, env_file=env_path, server={"port": 6000})

    assert config.browser.start_url == "https://example.com"
    assert config.server.port == 6000
    assert config.llm.provider == "mock"
