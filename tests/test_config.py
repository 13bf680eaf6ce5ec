"""Tests for settings loading."""

import pytest

from loam_iiif.config import Settings, load_settings, settings_from_env


class TestSettingsFromEnv:
    """Tests for settings_from_env()."""

    def test_defaults(self):
        """Test the defaults with an empty environment."""
        settings = settings_from_env({})
        assert settings == Settings()
        assert settings.chat_provider == "bedrock"
        assert settings.bedrock_region == "us-east-1"
        assert settings.bedrock_model == "amazon.nova-lite-v1:0"
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.max_new_tokens == 1000
        assert settings.http_timeout == 30.0
        assert settings.aws_profile is None

    def test_overrides(self):
        """Test that every variable is read."""
        settings = settings_from_env(
            {
                "LOAM_CHAT_PROVIDER": "OpenAI",
                "LOAM_BEDROCK_REGION": "eu-west-1",
                "LOAM_BEDROCK_MODEL": "anthropic.claude-v2",
                "AWS_PROFILE": "library",
                "OPENAI_API_KEY": "sk-test",
                "LOAM_OPENAI_MODEL": "gpt-4o",
                "LOAM_MAX_NEW_TOKENS": "250",
                "LOAM_HTTP_TIMEOUT": "7.5",
            }
        )
        assert settings.chat_provider == "openai"
        assert settings.bedrock_region == "eu-west-1"
        assert settings.bedrock_model == "anthropic.claude-v2"
        assert settings.aws_profile == "library"
        assert settings.openai_api_key == "sk-test"
        assert settings.openai_model == "gpt-4o"
        assert settings.max_new_tokens == 250
        assert settings.http_timeout == 7.5

    def test_blank_values_use_defaults(self):
        """Test that empty strings count as unset."""
        settings = settings_from_env({"LOAM_CHAT_PROVIDER": "", "AWS_PROFILE": "", "LOAM_MAX_NEW_TOKENS": " "})
        assert settings == Settings()

    def test_unknown_provider(self):
        """Test that unknown providers are rejected."""
        with pytest.raises(ValueError, match="LOAM_CHAT_PROVIDER"):
            settings_from_env({"LOAM_CHAT_PROVIDER": "llama"})

    @pytest.mark.parametrize("value", ["lots", "0", "-3", "1.5"])
    def test_bad_token_limit(self, value):
        """Test that the token limit must be a positive integer."""
        with pytest.raises(ValueError, match="LOAM_MAX_NEW_TOKENS"):
            settings_from_env({"LOAM_MAX_NEW_TOKENS": value})

    def test_bad_timeout(self):
        """Test that the timeout must be a number."""
        with pytest.raises(ValueError, match="LOAM_HTTP_TIMEOUT"):
            settings_from_env({"LOAM_HTTP_TIMEOUT": "soon"})


class TestWithProfile:
    """Tests for Settings.with_profile()."""

    def test_profile_overrides(self):
        """Test that --profile replaces AWS_PROFILE."""
        settings = Settings(aws_profile="default").with_profile("archive")
        assert settings.aws_profile == "archive"

    @pytest.mark.parametrize("profile", [None, ""])
    def test_no_profile_keeps_settings(self, profile):
        """Test that an absent profile changes nothing."""
        settings = Settings(aws_profile="default")
        assert settings.with_profile(profile) is settings


class TestLoadSettings:
    """Tests for load_settings() with .env files."""

    def test_explicit_env_file(self, clean_env):
        """Test reading an explicit .env path."""
        env_file = clean_env / "loam.env"
        env_file.write_text("LOAM_CHAT_PROVIDER=openai\nOPENAI_API_KEY=sk-file\n", encoding="utf-8")
        settings = load_settings(str(env_file))
        assert settings.chat_provider == "openai"
        assert settings.openai_api_key == "sk-file"

    def test_env_file_found_in_parent(self, clean_env, monkeypatch):
        """Test that .env is found by walking up from the working directory."""
        (clean_env / ".env").write_text("LOAM_BEDROCK_REGION=ap-south-1\n", encoding="utf-8")
        nested = clean_env / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert load_settings().bedrock_region == "ap-south-1"

    def test_environment_wins_over_file(self, clean_env, monkeypatch):
        """Test that variables already set are not overridden."""
        (clean_env / ".env").write_text("LOAM_BEDROCK_MODEL=from-file\n", encoding="utf-8")
        monkeypatch.setenv("LOAM_BEDROCK_MODEL", "from-env")
        assert load_settings().bedrock_model == "from-env"

    def test_missing_env_file(self, clean_env):
        """Test that a missing explicit file falls back to defaults."""
        assert load_settings(str(clean_env / "absent.env")) == Settings()
