"""
配置测试
"""
import pytest

from config import Settings
from core.exceptions import ConfigurationError


class TestSettings:

    def test_missing_token_raises(self):
        settings = Settings(TELEGRAM_BOT_TOKEN="", _env_file=None)
        with pytest.raises(ConfigurationError):
            settings.require_telegram_token()

    def test_token_is_returned(self):
        settings = Settings(TELEGRAM_BOT_TOKEN=" 123:abc ", _env_file=None)
        assert settings.require_telegram_token() == "123:abc"

    def test_quote_asset_normalized(self):
        assert Settings(QUOTE_ASSET="usdc", _env_file=None).QUOTE_ASSET == "USDC"
        assert Settings(QUOTE_ASSET="", _env_file=None).QUOTE_ASSET == "USDT"
