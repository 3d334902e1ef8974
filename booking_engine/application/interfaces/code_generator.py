"""Port for OTP code generation."""

from abc import ABC, abstractmethod

from booking_engine.domain.services import otp


class OtpCodeGenerator(ABC):
    @abstractmethod
    def generate(self) -> str:
        """Return a fresh 4-digit numeric code."""
        raise NotImplementedError


class RandomOtpCodeGenerator(OtpCodeGenerator):
    def generate(self) -> str:
        return otp.generate_code()


class FakeOtpCodeGenerator(OtpCodeGenerator):
    """
    Predictable codes for tests.

    Hands out queued codes first, then counts up from ``start``.
    """

    def __init__(self, start: int = 1000):
        self._counter = start
        self._queued: list[str] = []
        self.issued: list[str] = []

    def queue(self, *codes: str) -> None:
        self._queued.extend(codes)

    def generate(self) -> str:
        if self._queued:
            code = self._queued.pop(0)
        else:
            code = f"{self._counter:04d}"
            self._counter = 1000 if self._counter >= 9999 else self._counter + 1
        self.issued.append(code)
        return code
