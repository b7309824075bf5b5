"""Signal generators shared by the tests."""

import numpy as np


def sine(frequency, sample_rate=44100, amplitude=0.5, size=2048, phase=0.0):
    t = np.arange(size) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t + phase)
