import copy
import logging

import numpy as np
import pandas as pd

import torch
import torch.nn as nn
import torch.optim as optim
from torch.utils.data import DataLoader, Dataset
from sklearn.ensemble import RandomForestRegressor
from sklearn.preprocessing import StandardScaler

from typing import TYPE_CHECKING

from .features import FEATURE_SET, build_training_frame
from ..utils import (
    MLP_BATCH_SIZE,
    MLP_HIDDEN_SIZE,
    MLP_LEARNING_RATE,
    MLP_NUM_EPOCHS,
    N_ESTIMATORS,
    SEED,
)

if TYPE_CHECKING:
    from .features import EntityRatings

BACKENDS = ('forest', 'mlp')


class ModelNotReady(RuntimeError):
    pass


def set_seeds(seed: int = SEED) -> None:
    np.random.seed(seed)
    torch.manual_seed(seed)
    torch.cuda.manual_seed_all(seed)
    torch.backends.cudnn.deterministic = True
    torch.backends.cudnn.benchmark = False


class FinishDataset(Dataset):
    def __init__(self, X: torch.FloatTensor, y: torch.FloatTensor) -> None:
        self.X = X
        self.y = y

    def __len__(self) -> int:
        return len(self.X)

    def __getitem__(self, idx: int) -> dict[str, torch.Tensor]:
        return {"X": self.X[idx], "y": self.y[idx]}


class PositionMLP(nn.Module):
    def __init__(self, input_size: int, hidden_size: int, dropout: float = 0.1) -> None:
        super().__init__()

        if input_size <= 0:
            raise ValueError(f"Input Size MUST be POSITIVE, got {input_size}")
        if hidden_size <= 0:
            raise ValueError(f"Hidden Size MUST be POSITIVE, got {hidden_size}")

        self.layers = nn.Sequential(
            nn.Linear(input_size, hidden_size),
            nn.ReLU(),
            nn.Dropout(dropout),
            nn.Linear(hidden_size, hidden_size // 2),
            nn.ReLU(),
            nn.Linear(hidden_size // 2, 1),
        )

        self._init_weights()

    def _init_weights(self) -> None:
        for name, param in self.named_parameters():
            if 'weight' in name:
                nn.init.xavier_normal_(param)
            elif 'bias' in name:
                nn.init.zeros_(param)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.layers(x)


class TorchRegressor:
    def __init__(
        self,
        hidden_size: int = MLP_HIDDEN_SIZE,
        batch_size: int = MLP_BATCH_SIZE,
        num_epochs: int = MLP_NUM_EPOCHS,
        learning_rate: float = MLP_LEARNING_RATE,
        seed: int = SEED,
    ) -> None:
        self.hidden_size = hidden_size
        self.batch_size = batch_size
        self.num_epochs = num_epochs
        self.learning_rate = learning_rate
        self.seed = seed
        self.scaler = StandardScaler()
        self.model: PositionMLP | None = None
        self.device = torch.device('cuda' if torch.cuda.is_available() else 'cpu')

    def _split(self, X: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        if len(X) < 10:
            return X, y, X, y

        order = np.random.default_rng(self.seed).permutation(len(X))
        cut = int(len(X) * 0.9)
        train_idx, val_idx = order[:cut], order[cut:]
        return X[train_idx], y[train_idx], X[val_idx], y[val_idx]

    def fit(self, X: pd.DataFrame, y: pd.Series) -> 'TorchRegressor':
        set_seeds(self.seed)

        X_scaled = self.scaler.fit_transform(np.asarray(X, dtype=np.float64)).astype(np.float32)
        y_arr = np.asarray(y, dtype=np.float32).reshape(-1, 1)
        X_train, y_train, X_val, y_val = self._split(X_scaled, y_arr)

        effective_batch_size = max(1, min(self.batch_size, len(X_train)))
        train_loader = DataLoader(
            FinishDataset(torch.from_numpy(X_train), torch.from_numpy(y_train)),
            batch_size=effective_batch_size, shuffle=True,
        )
        val_loader = DataLoader(
            FinishDataset(torch.from_numpy(X_val), torch.from_numpy(y_val)),
            batch_size=effective_batch_size,
        )

        self.model = PositionMLP(X_train.shape[1], self.hidden_size).to(self.device)

        criterion = nn.MSELoss()
        optimizer = optim.Adam(self.model.parameters(), lr=self.learning_rate, weight_decay=1e-5)
        scheduler = optim.lr_scheduler.ReduceLROnPlateau(optimizer, mode='min', factor=0.5, patience=5)

        best_val_loss = float('inf')
        best_state = copy.deepcopy(self.model.state_dict())
        early_stop_counter = 0
        early_stop_patience = 15

        for epoch in range(self.num_epochs):
            self.model.train()
            train_loss = 0.0
            batch_count = 0

            for batch in train_loader:
                batch_X = batch["X"].to(self.device)
                batch_y = batch["y"].to(self.device)

                optimizer.zero_grad()
                loss = criterion(self.model(batch_X), batch_y)
                loss.backward()
                torch.nn.utils.clip_grad_norm_(self.model.parameters(), max_norm=1.0)
                optimizer.step()

                train_loss += loss.item()
                batch_count += 1

            self.model.eval()
            val_loss = 0.0
            val_batch_count = 0
            with torch.no_grad():
                for batch in val_loader:
                    outputs = self.model(batch["X"].to(self.device))
                    val_loss += criterion(outputs, batch["y"].to(self.device)).item()
                    val_batch_count += 1

            avg_train_loss = train_loss / max(1, batch_count)
            avg_val_loss = val_loss / max(1, val_batch_count)
            scheduler.step(avg_val_loss)

            if (epoch + 1) % 20 == 0 or epoch < 3:
                logging.info(f'Epoch {epoch + 1:03}/{self.num_epochs} - Train Loss: {avg_train_loss:.4f} - Val Loss: {avg_val_loss:.4f}')

            if avg_val_loss < best_val_loss:
                best_val_loss = avg_val_loss
                best_state = copy.deepcopy(self.model.state_dict())
                early_stop_counter = 0
            else:
                early_stop_counter += 1

            if early_stop_counter >= early_stop_patience:
                logging.info(f'Early Stop Triggered at Epoch #{epoch + 1}')
                break

        self.model.load_state_dict(best_state)
        self.model.eval()
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        if self.model is None:
            raise ModelNotReady("Model Not Trained - Cannot Predict")

        X_scaled = self.scaler.transform(np.asarray(X, dtype=np.float64)).astype(np.float32)
        with torch.no_grad():
            outputs = self.model(torch.from_numpy(X_scaled).to(self.device))
        return outputs.cpu().numpy().flatten().astype(np.float64)


class F1FinishPredictor:
    def __init__(self, backend: str = 'forest', seed: int = SEED) -> None:
        if backend not in BACKENDS:
            raise ValueError(f"Unknown Backend '{backend}' - Expected One of {', '.join(BACKENDS)}")

        self.backend = backend
        self.seed = seed
        self.model: RandomForestRegressor | TorchRegressor | None = None

    @property
    def is_trained(self) -> bool:
        return self.model is not None

    def _build_model(self) -> RandomForestRegressor | TorchRegressor:
        if self.backend == 'mlp':
            return TorchRegressor(seed=self.seed)
        return RandomForestRegressor(n_estimators=N_ESTIMATORS, random_state=self.seed, n_jobs=-1)

    def train(self, table: pd.DataFrame, ratings: 'EntityRatings') -> 'F1FinishPredictor':
        if self.is_trained:
            raise RuntimeError("Model Already Trained - Create a New Predictor to Retrain")

        X, y = build_training_frame(table, ratings)
        if X.empty:
            raise ValueError("No Training Rows Available - Cannot Train")

        set_seeds(self.seed)
        model = self._build_model()
        model.fit(X, y)
        self.model = model

        logging.info(f"Model Trained on {len(X)} Rows [{self.backend}]")
        for feature, importance in self.feature_importances().items():
            logging.info(f"- Importance {feature}: {importance:.4f}")

        return self

    def _check_ready(self) -> None:
        if self.model is None:
            raise ModelNotReady("Model Not Trained - Cannot Predict")

    def estimate_many(self, features: pd.DataFrame) -> np.ndarray:
        self._check_ready()
        return np.asarray(self.model.predict(features[FEATURE_SET]), dtype=np.float64)  # type: ignore

    def estimate(self, features: pd.DataFrame) -> float:
        return float(self.estimate_many(features)[0])

    def infer(self, features: pd.DataFrame) -> int:
        return to_position(self.estimate(features))

    def feature_importances(self) -> dict[str, float]:
        if isinstance(self.model, RandomForestRegressor):
            return dict(zip(FEATURE_SET, map(float, self.model.feature_importances_)))
        return {}


def to_position(raw: float) -> int:
    return int(max(1.0, np.rint(raw)))
