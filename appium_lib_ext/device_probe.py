"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Capture Preconditions (Appium Endpoint, Online Device)
"""
import logging
import re
import subprocess
from typing import Callable, List, Optional

from appium_lib_ext.webdriver_client import AppiumDriver
from libs.dataclass.errors import EndpointUnreachable, NoDeviceOnline

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_S = 15

_IOS_BOOTED_RE = re.compile(r"\(([0-9A-Fa-f-]{36})\)\s+\(Booted\)")

Runner = Callable[[List[str]], str]


def _run(cmd: List[str]) -> str:
    completed = subprocess.run(cmd, capture_output=True, text=True, timeout=PROBE_TIMEOUT_S, check=True)
    return completed.stdout


def parse_adb_devices(output: str) -> List[str]:
    devices = []
    for line in output.splitlines()[1:]:
        parts = line.split()
        if len(parts) >= 2 and parts[1] == "device":
            devices.append(parts[0])
    return devices


def parse_simctl_booted(output: str) -> List[str]:
    return _IOS_BOOTED_RE.findall(output)


def list_online_devices(platform: str, runner: Optional[Runner] = None) -> List[str]:
    runner = runner or _run
    if platform == "ios":
        cmd = ["xcrun", "simctl", "list", "devices", "booted"]
        parse = parse_simctl_booted
    else:
        cmd = ["adb", "devices"]
        parse = parse_adb_devices
    try:
        output = runner(cmd)
    except FileNotFoundError as e:
        raise NoDeviceOnline(platform, f"'{cmd[0]}' is not installed or not on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise NoDeviceOnline(platform, f"'{' '.join(cmd)}' timed out after {PROBE_TIMEOUT_S}s") from e
    except subprocess.CalledProcessError as e:
        raise NoDeviceOnline(platform, f"'{' '.join(cmd)}' exited with {e.returncode}") from e
    return parse(output)


def ensure_endpoint_reachable(driver: AppiumDriver) -> None:
    result = driver.status()
    if not result.ok:
        raise EndpointUnreachable(driver.base_url, result.error or "")
    logger.info(f"Appium endpoint reachable at {driver.base_url}")


def ensure_device_online(platform: str, runner: Optional[Runner] = None) -> List[str]:
    devices = list_online_devices(platform, runner=runner)
    if not devices:
        raise NoDeviceOnline(platform)
    logger.info(f"Online {platform} device(s): {', '.join(devices)}")
    return devices
