"""
Binance Volume Monitor Bot - FastAPI 应用入口

启动时验证 Telegram token，恢复上次运行中的监控会话，并启动命令轮询。
"""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI

from api.routes import router
from config import settings
from connectors import BinanceKlineClient, CoinGeckoClient
from core.exceptions import ConfigurationError
from monitoring.manager import MonitorManager
from monitoring.session_store import SessionStateStore
from monitoring.telegram_bot import TelegramCommandBot
from monitoring.telegram_notifier import TelegramNotifier
from monitoring.volume_monitor import VolumeMonitor


def setup_logging():
    """配置日志系统 - 同时输出到控制台和文件"""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # 创建根日志器
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # 清除已有处理器
    logger.handlers.clear()

    # 格式器 - 不记录敏感信息
    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 控制台处理器
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 文件处理器
    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    setup_logging()

    print("=" * 60)
    print("🚀 Starting Binance Volume Monitor Bot...")
    print("=" * 60)
    print(f"📡 Ranking API: {settings.COINGECKO_BASE_URL}")
    print(f"💱 Kline API: {settings.BINANCE_BASE_URL}")
    print(f"💾 Status File: {settings.STATUS_FILE}")
    print("=" * 60)

    # 启动期致命错误: token 缺失或认证失败
    token = settings.require_telegram_token()
    proxy = settings.HTTP_PROXY or None

    notifier = TelegramNotifier(bot_token=token, proxy=proxy)
    await notifier.get_me()

    market = CoinGeckoClient(
        base_url=settings.COINGECKO_BASE_URL,
        quote_asset=settings.QUOTE_ASSET,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        proxy=proxy,
    )
    klines = BinanceKlineClient(
        base_url=settings.BINANCE_BASE_URL,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        proxy=proxy,
    )

    monitor = VolumeMonitor(market=market, klines=klines, sink=notifier)
    manager = MonitorManager(SessionStateStore(settings.STATUS_FILE), monitor, notifier)
    app.state.manager = manager

    await manager.resume()

    bot = TelegramCommandBot(notifier, manager)
    bot_task = asyncio.create_task(bot.run())

    print(f"\n📖 API 文档: http://localhost:{settings.API_PORT}/docs")
    print(f"📊 会话接口: http://localhost:{settings.API_PORT}/api/v1/sessions")
    print("\n")

    yield

    # 关闭时
    bot.stop()
    bot_task.cancel()
    await asyncio.gather(bot_task, return_exceptions=True)
    await manager.shutdown()
    await market.close()
    await klines.close()
    await notifier.close()
    print("\n👋 Binance Volume Monitor Bot Shutting Down...")


app = FastAPI(
    title="Binance Volume Monitor Bot",
    description="""
## 小时成交量异动监控

市值前 100 的币种，当前小时成交量超过上一小时 5 倍时推送 Telegram 警报。

### Telegram 命令
- `/start` - 帮助
- `/monitor` - 开始监控
- `/stop` - 停止监控
- `/status` - 查看状态

### API 接口
- `GET /api/v1/sessions` - 所有会话
- `GET /api/v1/sessions/{id}` - 会话状态
- `POST /api/v1/sessions/{id}/monitor` - 开始监控
- `POST /api/v1/sessions/{id}/stop` - 停止监控
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 注册路由
app.include_router(router)


# 根路径重定向到文档
@app.get("/", include_in_schema=False)
async def root():
    """重定向到 API 文档"""
    from fastapi.responses import RedirectResponse
    return RedirectResponse(url="/docs")


if __name__ == "__main__":
    import uvicorn

    try:
        settings.require_telegram_token()
    except ConfigurationError as e:
        print(f"❌ {e}")
        sys.exit(1)

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level="info"
    )
