import argparse
import logging

from f1_finish.app import start
from f1_finish.utils import DATA_FOLDER, ColourFormatter


def run(choice: int | None = None, data_folder: str = str(DATA_FOLDER), backend: str = 'forest') -> None:
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(ColourFormatter())
    logger.addHandler(handler)

    start(choice, data_folder=data_folder, backend=backend)


if __name__ == '__main__':
    parser = argparse.ArgumentParser(
        description='F1 Finish Forecasting'
    )
    parser.add_argument(
        'choice',
        nargs='?',
        type=int,
        help='Menu Options: 1=Train, 2=Predict, 3=Wins, 4=Exit'
    )
    parser.add_argument(
        '--data',
        default=str(DATA_FOLDER),
        help='Folder holding results.csv, races.csv, drivers.csv, constructors.csv & circuits.csv'
    )
    parser.add_argument(
        '--backend',
        choices=['forest', 'mlp'],
        default='forest',
        help='Regression model: forest=RandomForest (default), mlp=PyTorch feed-forward network'
    )
    args = parser.parse_args()

    try:
        run(args.choice, args.data, args.backend)
    except KeyboardInterrupt:
        pass
