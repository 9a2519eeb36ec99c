#!/usr/bin/env python3
"""
Preflight check: is the generation service answering, is the Appium server up,
and is a device online. Credentials and endpoints come from the environment /
.env file only.
"""
import argparse
import sys
import traceback
from typing import List, Optional

import dotenv

from appium_lib_ext.config import AppConfig
from appium_lib_ext.device_probe import ensure_device_online, ensure_endpoint_reachable
from appium_lib_ext.webdriver_client import AppiumDriver
from constant.const_config import ENV_FILE
from libs.dataclass.errors import FatalPrecondition
from llm_service.oracle import build_llm_client


def check_generation_service(cfg: AppConfig) -> bool:
    print("\n1. Generation service")
    print(f"   Endpoint: {cfg.generation.azureEndpoint or 'api.openai.com'}")
    print(f"   Model: {cfg.generation.model}")
    try:
        client = build_llm_client(cfg.generation)
        print("   ✓ Client initialized successfully")
        output = client.execute_chat_completion_api(
            [
                {"role": "system", "content": "You are a helpful assistant."},
                {"role": "user", "content": "Say hello and confirm you are responding."},
            ],
            response_format={"type": "text"}, temperature=0.7, max_tokens=100, max_attempts=3)
    except FatalPrecondition as e:
        print(f"   ✗ {e}")
        return False
    except Exception as e:
        print(f"   ✗ Error occurred: {type(e).__name__}")
        print(f"   Message: {e}")
        print(traceback.format_exc())
        return False
    print("   ✓ Response received:")
    print("-" * 60)
    print(output)
    print("-" * 60)
    return True


def check_appium(cfg: AppConfig) -> bool:
    print("\n2. Appium server")
    print(f"   URL: {cfg.capture.appiumUrl}")
    try:
        ensure_endpoint_reachable(AppiumDriver(cfg.capture.appiumUrl, platform=cfg.platform,
                                               timeout_s=cfg.capture.requestTimeoutS))
    except FatalPrecondition as e:
        print(f"   ✗ {e}")
        return False
    print("   ✓ Server is responding")
    return True


def check_device(cfg: AppConfig) -> bool:
    print(f"\n3. {cfg.platform} device")
    if cfg.capture.skipDeviceProbe:
        print("   - skipped (SKIP_DEVICE_PROBE)")
        return True
    try:
        devices = ensure_device_online(cfg.platform)
    except FatalPrecondition as e:
        print(f"   ✗ {e}")
        return False
    print(f"   ✓ Online: {', '.join(devices)}")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check generation service, Appium server and device availability.")
    parser.add_argument("--skip-llm", action="store_true", help="Do not call the generation service")
    parser.add_argument("--skip-appium", action="store_true", help="Do not check the Appium server or device")
    args = parser.parse_args(argv)

    dotenv.load_dotenv(dotenv_path=ENV_FILE)
    try:
        cfg = AppConfig.from_env()
    except ValueError as e:
        print(f"✗ {e}")
        return 2

    print("=" * 60)
    print("Checking Environment")
    print("=" * 60)
    ok = True
    if not args.skip_llm:
        ok = check_generation_service(cfg) and ok
    if not args.skip_appium:
        ok = check_appium(cfg) and ok
        ok = check_device(cfg) and ok
    print("\n" + "=" * 60)
    print("✓ Environment is ready" if ok else "✗ Environment is not ready")
    print("=" * 60)
    return 0 if ok else 2


if __name__ == "__main__":
    sys.exit(main())
