"""gobfuzz: build Go packages into libFuzzer-style native fuzzing archives."""

__version__ = "0.1.0"
