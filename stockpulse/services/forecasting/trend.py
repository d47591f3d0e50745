from typing import Sequence


def linear_trend(values: Sequence[float]) -> float:
    """Ordinary-least-squares slope of ``values`` against their index.

    Fewer than two points, or a degenerate denominator, is a flat trend (0.0).
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = sum_y = sum_xy = sum_x2 = 0.0
    for i, value in enumerate(values):
        sum_x += i
        sum_y += value
        sum_xy += i * value
        sum_x2 += i * i

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator
