"""Plain-text summaries of combination results"""

import numbers

import pandas as pd

from combination.models import CombinationResult


def weights_frame(result: CombinationResult) -> pd.DataFrame:
    """Model weights as a DataFrame indexed by model name"""
    frame = pd.DataFrame({'weight': result.weights}, index=pd.Index(result.models, name='model'))
    return frame


def summarize(result: CombinationResult) -> str:
    """Method name, weights, intercept and accuracy of a result as text"""
    weights_label = 'Weights' if result.linear else 'Average effective weights'
    lines = [
        f"Method: {result.method_name}",
        "",
        f"{weights_label}:",
        weights_frame(result).to_string(),
    ]
    if result.intercept is not None:
        lines.extend(["", f"Intercept: {result.intercept:.6f}"])

    lines.extend([
        "",
        "Accuracy:",
        result.accuracy_frame().to_string(float_format=lambda x: f"{x:.4f}"),
    ])

    if result.details:
        lines.extend(["", "Details:"])
        for key, value in result.details.items():
            if isinstance(value, (numbers.Number, str)):
                lines.append(f"  {key}: {value}")
    return "\n".join(lines)
