from .constants import (
    APPROXIMATE_TOLERANCE,
    DATA_FOLDER,
    MLP_BATCH_SIZE,
    MLP_HIDDEN_SIZE,
    MLP_LEARNING_RATE,
    MLP_NUM_EPOCHS,
    N_ESTIMATORS,
    SEED,
    SUGGESTION_LIMIT,
    TABLE_FILES,
)
from .logger import ColourFormatter
