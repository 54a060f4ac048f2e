#!/usr/bin/env python3
"""
Startup script for the Hedera agent relay
"""

import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv


def main():
    """Main startup function"""

    env_file = Path(__file__).parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)
        print(f"✅ Loaded environment from {env_file}")
    else:
        print("⚠️  Warning: .env file not found, using process environment")

    from agent_relay.app import create_app
    from agent_relay.config import get_settings
    from agent_relay.llm import API_KEY_ENV, LLMInvalidModelError, detect_provider

    try:
        settings = get_settings()
        provider = detect_provider(settings.llm_model)
    except (ValueError, LLMInvalidModelError) as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    key_name = API_KEY_ENV[provider]
    if not os.getenv(key_name):
        print(f"❌ Error: {key_name} environment variable is required for model {settings.llm_model}!")
        sys.exit(1)

    print("🚀 Starting Hedera agent relay...")
    print(f"🌐 Network: {settings.network}")
    print(f"🤖 Model: {settings.llm_model} ({provider})")
    print(f"📡 WebSocket: ws://{settings.host}:{settings.port}/ws")
    print(f"🩺 Health check: http://{settings.host}:{settings.port}/health")
    print()

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
