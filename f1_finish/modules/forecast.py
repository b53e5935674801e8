import logging
from dataclasses import dataclass, field

import pandas as pd

from .features import EntityRatings, assemble_features, build_entity_ratings, build_training_frame
from .metrics import evaluate_fit
from .model import F1FinishPredictor, to_position
from .parse import win_counts
from .resolve import EntityNotFound, resolve_entity


@dataclass(frozen=True)
class Prediction:
    driver_input: str
    driver: str
    constructor_input: str
    constructor: str
    circuit_input: str
    circuit: str
    year: int
    predicted_position: int
    raw_estimate: float


@dataclass(frozen=True)
class NotFound:
    kind: str
    query: str | None
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ForecastContext:
    table: pd.DataFrame
    ratings: EntityRatings
    predictor: F1FinishPredictor


def build_context(table: pd.DataFrame, backend: str = 'forest') -> ForecastContext:
    logging.info("Building Entity Ratings . . .")
    ratings = build_entity_ratings(table)

    logging.info("Training Model . . .")
    predictor = F1FinishPredictor(backend=backend).train(table, ratings)
    logging.info("Model Trained Successfully!")

    return ForecastContext(table=table, ratings=ratings, predictor=predictor)


def training_fit(context: ForecastContext) -> dict[str, float]:
    X, y = build_training_frame(context.table, context.ratings)
    return evaluate_fit(y.tolist(), context.predictor.estimate_many(X).tolist())


def predict_finish(
    context: ForecastContext,
    driver_query: str,
    constructor_query: str,
    circuit_query: str,
    year: int,
) -> Prediction | NotFound:
    ratings = context.ratings
    try:
        driver = resolve_entity('driver', driver_query, ratings.drivers)
        constructor = resolve_entity('constructor', constructor_query, ratings.constructors)
        circuit = resolve_entity('circuit', circuit_query, ratings.circuits)
    except EntityNotFound as E:
        logging.warning(f"{E} - Suggesting {len(E.suggestions)} Known Names")
        return NotFound(kind=E.kind, query=E.query, suggestions=E.suggestions)

    features = assemble_features(
        driver, constructor, circuit, year,
        ratings.drivers, ratings.constructors, ratings.circuits,
    )

    raw_estimate = context.predictor.estimate(features)
    predicted_position = to_position(raw_estimate)

    return Prediction(
        driver_input=driver_query,
        driver=driver,
        constructor_input=constructor_query,
        constructor=constructor,
        circuit_input=circuit_query,
        circuit=circuit,
        year=int(year),
        predicted_position=predicted_position,
        raw_estimate=raw_estimate,
    )


def driver_wins(context: ForecastContext) -> pd.DataFrame:
    return win_counts(context.table, 'driver')


def constructor_wins(context: ForecastContext) -> pd.DataFrame:
    return win_counts(context.table, 'constructor')
