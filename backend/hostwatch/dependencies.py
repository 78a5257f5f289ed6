from functools import lru_cache

from hostwatch.config import get_settings
from hostwatch.services.aggregator import Aggregator
from hostwatch.services.command_runner import CommandRunner


@lru_cache
def get_command_runner() -> CommandRunner:
    return CommandRunner(get_settings())


@lru_cache
def get_aggregator() -> Aggregator:
    # One instance per process so the CPU baseline survives between polls
    return Aggregator(get_settings(), get_command_runner())
