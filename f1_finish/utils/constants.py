import pathlib

DATA_FOLDER = pathlib.Path('data')

TABLE_FILES = {
    'results': 'results.csv',
    'races': 'races.csv',
    'drivers': 'drivers.csv',
    'constructors': 'constructors.csv',
    'circuits': 'circuits.csv',
}

SUGGESTION_LIMIT = 12
APPROXIMATE_TOLERANCE = 0.2

SEED = 42
N_ESTIMATORS = 300

MLP_HIDDEN_SIZE = 64
MLP_BATCH_SIZE = 64
MLP_NUM_EPOCHS = 200
MLP_LEARNING_RATE = 0.001
