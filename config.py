"""
配置管理 - 所有敏感信息通过环境变量读取

必需配置:
- TELEGRAM_BOT_TOKEN: 从 @BotFather 获取的机器人 token，Bot 服务启动时缺失即退出

控制台模式 (scripts/run_console_monitor.py) 不需要 token。
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """应用配置"""

    # Telegram Bot
    TELEGRAM_BOT_TOKEN: str = ""

    # 行情源
    # 市值排名: CoinGecko /coins/markets
    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    # 成交量: Binance 现货 K 线
    BINANCE_BASE_URL: str = "https://api.binance.com"
    # 交易对计价后缀 (BTC -> BTCUSDT)
    QUOTE_ASSET: str = "USDT"

    # 监控状态持久化文件 (chat_id -> 是否监控)
    STATUS_FILE: str = "monitoring_status.json"

    # HTTP 请求超时 (秒)
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # 代理配置 (可选，解决 403 地域限制)
    # 格式: http://127.0.0.1:7890
    HTTP_PROXY: str = ""

    # 日志配置
    LOG_FILE: str = "volume_monitor.log"  # 日志文件路径，留空则只输出到控制台
    LOG_LEVEL: str = "INFO"               # 日志级别

    # HTTP 控制接口
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    @field_validator('QUOTE_ASSET', mode='before')
    @classmethod
    def normalize_quote_asset(cls, v):
        """统一大写，空值回退到 USDT"""
        if v == '' or v is None:
            return "USDT"
        return str(v).strip().upper()

    @field_validator('API_PORT', mode='before')
    @classmethod
    def parse_api_port(cls, v):
        """处理空字符串的情况"""
        if v == '' or v is None:
            return 8000
        return int(v)

    def require_telegram_token(self) -> str:
        """返回 Bot token，未配置时抛出 ConfigurationError"""
        token = self.TELEGRAM_BOT_TOKEN.strip()
        if not token:
            raise ConfigurationError("TELEGRAM_BOT_TOKEN environment variable is not set")
        return token

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
