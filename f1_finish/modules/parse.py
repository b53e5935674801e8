import logging
from pathlib import Path

import pandas as pd

from ..utils import DATA_FOLDER, TABLE_FILES

# Ordered candidates per logical field; the first column present wins.
# Earlier entries match the current Kaggle export, later ones older or
# hand-built exports.
COLUMN_CANDIDATES: dict[str, list[str]] = {
    'driver': ['driverRef', 'driver_ref', 'driver'],
    'constructor': ['constructorRef', 'constructor_ref', 'constructor', 'name_constructor'],
    'circuit': ['circuitName', 'name_circuit', 'circuit_name', 'circuitRef_circuit', 'circuitRef'],
    'position': ['positionOrder', 'position_order', 'position', 'positionText'],
    'year': ['year', 'season'],
}

JOIN_KEYS: dict[str, list[str]] = {
    'race': ['raceId', 'race_id'],
    'driver': ['driverId', 'driver_id'],
    'constructor': ['constructorId', 'constructor_id'],
    'circuit': ['circuitId', 'circuit_id'],
}

OUTPUT_COLUMNS = ['driver', 'constructor', 'circuit', 'position', 'year']


class SchemaMismatch(KeyError):
    def __init__(self, missing: list[str], available: list[str]) -> None:
        self.missing = missing
        self.available = available
        super().__init__(
            f"Couldn't Find Expected Columns for {', '.join(missing)}. "
            f"Available Columns: {', '.join(available)}"
        )

    def __str__(self) -> str:
        return str(self.args[0])


def pick_column(frame: pd.DataFrame, candidates: list[str]) -> str | None:
    for name in candidates:
        if name in frame.columns:
            return name
    return None


def _join_key(left: pd.DataFrame, right: pd.DataFrame, kind: str) -> str:
    for name in JOIN_KEYS[kind]:
        if name in left.columns and name in right.columns:
            return name

    raise SchemaMismatch(
        [f"{kind} key"],
        sorted(set(left.columns) | set(right.columns)),
    )


def _circuit_key(joined: pd.DataFrame, circuits: pd.DataFrame) -> tuple[str, str]:
    right_key = pick_column(circuits, JOIN_KEYS['circuit'])
    left_key = pick_column(joined, JOIN_KEYS['circuit'])
    if right_key is None or left_key is None:
        raise SchemaMismatch(['circuit key'], sorted(set(joined.columns) | set(circuits.columns)))
    return left_key, right_key


def join_tables(
    results: pd.DataFrame,
    races: pd.DataFrame,
    drivers: pd.DataFrame,
    constructors: pd.DataFrame,
    circuits: pd.DataFrame,
) -> pd.DataFrame:
    race_key = _join_key(results, races, 'race')
    joined = results.merge(races, on=race_key, how='left', suffixes=('', '_race'))

    driver_key = _join_key(joined, drivers, 'driver')
    joined = joined.merge(drivers, on=driver_key, how='left', suffixes=('', '_driver'))

    constructor_key = _join_key(joined, constructors, 'constructor')
    joined = joined.merge(constructors, on=constructor_key, how='left', suffixes=('', '_constructor'))

    left_key, right_key = _circuit_key(joined, circuits)
    circuits = circuits.add_suffix('_circuit').rename(columns={f"{right_key}_circuit": left_key})
    joined = joined.merge(circuits, on=left_key, how='left')

    return select_race_results(joined)


def select_race_results(joined: pd.DataFrame) -> pd.DataFrame:
    selected: dict[str, str] = {}
    missing: list[str] = []
    for field, candidates in COLUMN_CANDIDATES.items():
        column = pick_column(joined, candidates)
        if column is None:
            missing.append(field)
        else:
            selected[field] = column

    if missing:
        raise SchemaMismatch(missing, list(joined.columns))

    logging.info(f"Resolved Columns: {', '.join(f'{k}={v}' for k, v in selected.items())}")

    df = pd.DataFrame({
        'driver': joined[selected['driver']],
        'constructor': joined[selected['constructor']],
        'circuit': joined[selected['circuit']],
        'position': pd.to_numeric(joined[selected['position']], errors='coerce'),
        'year': pd.to_numeric(joined[selected['year']], errors='coerce'),
    })

    before = len(df)
    df = df[df['position'].notna() & (df['position'] > 0)]
    df = df.dropna(subset=['driver', 'constructor', 'circuit', 'year'])

    dropped = before - len(df)
    if dropped:
        logging.info(f"Dropped {dropped} Unclassified or Incomplete Rows")

    df = df.astype({
        'driver': str,
        'constructor': str,
        'circuit': str,
        'position': int,
        'year': int,
    })

    return df[OUTPUT_COLUMNS].reset_index(drop=True)


def read_tables(folder: Path | str = DATA_FOLDER) -> dict[str, pd.DataFrame]:
    folder = Path(folder)

    tables: dict[str, pd.DataFrame] = {}
    for name, filename in TABLE_FILES.items():
        path = folder / filename
        if not path.exists():
            raise FileNotFoundError(f"Missing Table '{name}': {path}")

        tables[name] = pd.read_csv(path, na_values=['\\N'], encoding='UTF-8')
        logging.info(f"- Read {len(tables[name])} Rows from {path}")

    return tables


def load_race_results(folder: Path | str = DATA_FOLDER) -> pd.DataFrame:
    tables = read_tables(folder)
    df = join_tables(**tables)
    logging.info(f"Flat Table: {len(df)} Classified Finishes, {df['year'].nunique()} Seasons")
    return df


def win_counts(table: pd.DataFrame, entity_column: str) -> pd.DataFrame:
    winners = table[table['position'] == 1]
    counts = winners.groupby(entity_column).size().reset_index(name='wins')
    return counts.sort_values(['wins', entity_column], ascending=[False, True]).reset_index(drop=True)
