import logging
import os

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from .utils import ensure_parent_dir

logger = logging.getLogger(__name__)


def missing_value_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    Check for missing values in the dataframe.

    Args:
        df: Input dataframe

    Returns:
        DataFrame with missing value statistics, worst columns first
    """
    missing = pd.DataFrame({
        'count': df.isna().sum(),
        'percentage': (df.isna().sum() / max(len(df), 1) * 100).round(2)
    })
    return missing[missing['count'] > 0].sort_values('percentage', ascending=False)


def plot_missing(df: pd.DataFrame, plot_path):
    """Heatmap of the missing-cell mask, one row per record."""
    ensure_parent_dir(plot_path)
    fig = plt.figure(figsize=(12, 6))
    sns.heatmap(df.isna().astype(int), cbar=False, yticklabels=False, cmap='viridis')
    plt.title('Missing Values')
    plt.tight_layout()
    plt.savefig(plot_path)
    plt.close(fig)
    logger.info(f"Missing value plot saved to {plot_path}")


def run_eda(df: pd.DataFrame, plots_dir='debug', name='train'):
    logger.info(f"Data shape: {df.shape}")
    summary = missing_value_summary(df)
    if summary.empty:
        logger.info("No missing values")
    else:
        logger.info(f"Missing values:\n{summary}")
    plot_missing(df, os.path.join(plots_dir, f'{name}_missing.png'))
    return summary
