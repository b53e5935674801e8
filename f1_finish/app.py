import logging
import os
from pathlib import Path
from tabulate import tabulate

import pandas as pd

from .modules import (
    ForecastContext,
    NotFound,
    SchemaMismatch,
    build_context,
    constructor_wins,
    driver_wins,
    format_evaluation_results,
    load_race_results,
    predict_finish,
    set_seeds,
    training_fit,
)
from .utils import DATA_FOLDER, SEED

TOP_DRIVERS = 20
TOP_CONSTRUCTORS = 10


def train_model(data_folder: Path | str = DATA_FOLDER, backend: str = 'forest') -> ForecastContext:
    set_seeds(SEED)

    logging.info("Loading Race Results . . .")
    table = load_race_results(data_folder)
    logging.info("Race Results Loaded Successfully!")

    context = build_context(table, backend=backend)
    print("\n" + format_evaluation_results(training_fit(context)))

    return context


def show_prediction(context: ForecastContext, driver: str, constructor: str, circuit: str, year: int) -> None:
    result = predict_finish(context, driver, constructor, circuit, year)

    if isinstance(result, NotFound):
        print(f"\n{result.kind.title()} Not Found for: '{result.query}'")
        print(f"Try One of These (Top {len(result.suggestions)}):")
        print(tabulate([[name] for name in result.suggestions], headers=[result.kind.title()], tablefmt="pretty"))
        return

    rows = [
        ['Driver', result.driver_input, result.driver],
        ['Constructor', result.constructor_input, result.constructor],
        ['Circuit', result.circuit_input, result.circuit],
    ]
    print(f"\nPrediction for {result.driver} at {result.circuit} in {result.year}:")
    print(tabulate(rows, headers=['', 'Input', 'Matched'], tablefmt="pretty"))
    print(f"Predicted Finishing Position (Rounded): P{result.predicted_position}")
    print(f"Raw Predicted Position (Decimal): {result.raw_estimate:.3f}")


def show_wins(context: ForecastContext) -> None:
    drivers = driver_wins(context).head(TOP_DRIVERS)
    print(f"\nTop {TOP_DRIVERS} Driver Wins:")
    print(tabulate(drivers.values.tolist(), headers=['Driver', 'Wins'], tablefmt="pretty"))

    constructors = constructor_wins(context)
    top = constructors.head(TOP_CONSTRUCTORS)
    total = constructors['wins'].sum()

    rows = [[name, wins, f"{wins / total * 100:.1f}%"] for name, wins in top.values.tolist()]
    others = constructors['wins'].iloc[TOP_CONSTRUCTORS:].sum()
    if others:
        rows.append(['Others', others, f"{others / total * 100:.1f}%"])

    print(f"\nConstructor Win Share (Top {TOP_CONSTRUCTORS} + Others):")
    print(tabulate(rows, headers=['Constructor', 'Wins', 'Share'], tablefmt="pretty"))


def _read_year() -> int | None:
    raw = input("Year: ").strip()
    try:
        return int(raw)
    except ValueError:
        logging.error(f"Invalid Year '{raw}' - Please Try Again!")
        return None


def start(
    initial_choice: int | None = None,
    data_folder: Path | str = DATA_FOLDER,
    backend: str = 'forest',
) -> None:
    os.system('cls' if os.name == 'nt' else 'clear')

    context: ForecastContext | None = None

    while True:
        print()

        header = "F1 Finish Forecasting"
        logging.info(header)

        logging.info("[1] Train Model")
        logging.info("[2] Predict Finishing Position")
        logging.info("[3] Driver & Constructor Wins")
        logging.info("[4] Exit")

        if initial_choice is not None:
            print(f"\nEnter your Choice: {initial_choice}")
            choice = str(initial_choice)
            initial_choice = None
        else:
            choice = input("\nEnter your Choice: ")

        print()
        try:
            if choice == '1':
                context = train_model(data_folder, backend)
            elif choice == '2':
                if context is None:
                    context = train_model(data_folder, backend)

                driver = input("Driver: ")
                constructor = input("Constructor: ")
                circuit = input("Circuit: ")
                year = _read_year()
                if year is not None:
                    show_prediction(context, driver, constructor, circuit, year)
            elif choice == '3':
                if context is None:
                    context = train_model(data_folder, backend)
                show_wins(context)
            elif choice == '4':
                logging.info("Exiting . . .")
                break
            else:
                logging.error("Invalid Choice - Please Try Again!")
        except (FileNotFoundError, SchemaMismatch, ValueError, pd.errors.ParserError) as E:
            logging.error(f"Could Not Load Race Results or Train Model: {E}")
