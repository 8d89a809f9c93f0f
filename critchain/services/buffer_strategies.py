from abc import ABC, abstractmethod

import numpy as np


class BufferCalculationStrategy(ABC):
    @abstractmethod
    def calculate_buffer_size(self, durations):
        """Calculate buffer size in minutes from the durations of a chain's tasks"""
        pass

    def get_name(self):
        """Get the name of this strategy"""
        return self.__class__.__name__


# Root Sum Square Method (RSS)
class RootSumSquareMethod(BufferCalculationStrategy):
    def __init__(self, fraction=0.5):
        if fraction < 0:
            raise ValueError("Fraction cannot be negative")
        self.fraction = fraction

    def calculate_buffer_size(self, durations):
        """
        Square root of the sum of squared safety margins, each margin being a
        fixed fraction of the task duration
        Buffer = sqrt(sum((fraction * d)²))
        """
        margins = np.asarray(list(durations), dtype=float) * self.fraction
        return float(np.sqrt(np.sum(margins**2)))

    def get_name(self):
        return "Root Sum Square Method (RSS)"


# Cut-and-Paste Method (C&PM)
class CutAndPasteMethod(BufferCalculationStrategy):
    def __init__(self, ratio=0.5):
        if ratio < 0 or ratio > 1:
            raise ValueError("Ratio must be between 0 and 1")
        self.ratio = ratio

    def calculate_buffer_size(self, durations):
        """
        Fixed share of the chain length
        Buffer = ratio * sum(durations)
        """
        return self.ratio * float(sum(durations))

    def get_name(self):
        return "Cut-and-Paste Method (C&PM)"
