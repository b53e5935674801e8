from .features import (
    FEATURE_SET,
    EntityRatings,
    assemble_features,
    build_entity_ratings,
    build_ratings,
    build_training_frame,
)
from .forecast import (
    ForecastContext,
    NotFound,
    Prediction,
    build_context,
    constructor_wins,
    driver_wins,
    predict_finish,
    training_fit,
)
from .metrics import evaluate_fit, format_evaluation_results
from .model import F1FinishPredictor, ModelNotReady, set_seeds
from .parse import SchemaMismatch, join_tables, load_race_results, read_tables, win_counts
from .resolve import NOT_FOUND, EntityNotFound, resolve, resolve_entity, suggest
