import numpy as np

from scipy.stats import spearmanr


def evaluate_fit(y_true: list[float], y_pred: list[float]) -> dict[str, float]:
    y_true_arr = np.asarray(y_true, dtype=np.float64)
    y_pred_arr = np.asarray(y_pred, dtype=np.float64)

    if len(y_true_arr) == 0:
        raise ValueError("No Predictions to Evaluate")

    errors = y_pred_arr - y_true_arr
    mse = float(np.mean(errors ** 2))
    mae = float(np.mean(np.abs(errors)))

    variance = float(np.var(y_true_arr))
    r2 = 1.0 - mse / variance if variance > 0 else 0.0

    if len(y_true_arr) > 1 and np.ptp(y_true_arr) > 0 and np.ptp(y_pred_arr) > 0:
        spearman_corr, _ = spearmanr(y_true_arr, y_pred_arr)
    else:
        spearman_corr = float('nan')

    rounded = np.maximum(np.rint(y_pred_arr), 1.0)
    accuracy = float(np.mean(rounded == y_true_arr))
    within_one = float(np.mean(np.abs(rounded - y_true_arr) <= 1))

    return {
        'mse': mse,
        'mae': mae,
        'r2': r2,
        'spearman': float(spearman_corr),
        'accuracy': accuracy,
        'within_one': within_one,
    }


def format_evaluation_results(metrics: dict[str, float]) -> str:
    lines = [
        "Training Fit:",
        f"- Mean Squared Error: {metrics['mse']:.3f}",
        f"- Mean Absolute Error: {metrics['mae']:.3f}",
        f"- Variance Explained: {metrics['r2'] * 100:.2f}%",
        f"- Spearman Correlation: {metrics['spearman']:.4f}",
        f"- Exact Position Accuracy: {metrics['accuracy'] * 100:.2f}%",
        f"- Within One Position: {metrics['within_one'] * 100:.2f}%",
    ]
    return "\n".join(lines)
