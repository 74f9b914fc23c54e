import argparse
from dataclasses import dataclass

from amount import POLICIES, AmountPolicy, SaturatingPolicy, get_policy

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class EngineConfig:
    overflow_policy: str = SaturatingPolicy.name
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.overflow_policy not in POLICIES:
            raise ValueError(f"Unknown overflow policy: {self.overflow_policy!r}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "EngineConfig":
        return cls(overflow_policy=args.overflow_policy, log_level=args.log_level.upper())

    def make_policy(self) -> AmountPolicy:
        return get_policy(self.overflow_policy)
