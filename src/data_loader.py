# src/data_loader.py

import pandas as pd
from typing import List, Optional, Set, Tuple
import logging
from pathlib import Path

import config
from models import Connection, Equipment, Facility


def _optional(row: pd.Series, column: str):
    """Value of an optional column, or None when absent or blank"""
    if column not in row.index or pd.isna(row[column]):
        return None
    return row[column]


class DataLoader:
    """Handles loading and validation of the facility network CSV files"""

    def __init__(self, data_path: Optional[str] = None):
        self.data_path = data_path or config.DATA_PATH

        # Define required columns for each file
        self.required_facility_columns = {
            "id",
            "name",
            "category",
            "co2_factor",
            "energy_factor",
            "capacity",
        }

        self.required_connection_columns = {
            "id",
            "from_id",
            "to_id",
            "distance",
            "pipeline_co2",
        }

    def load_file(self, filename: str, required_columns: Set[str]) -> pd.DataFrame:
        """
        Read one `;`-delimited network file and check its header

        Column names are trimmed and lower-cased; rows that are entirely
        blank are dropped.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If required columns are missing or no rows remain
        """
        try:
            file_path = Path(self.data_path) / filename
            df = pd.read_csv(file_path, delimiter=";", encoding="utf-8")

            df.columns = df.columns.str.strip().str.lower()
            missing_cols = required_columns - set(df.columns)
            if missing_cols:
                raise ValueError(
                    f"Missing required columns in {filename}: {sorted(missing_cols)}"
                )

            df = df.dropna(how="all")
            if df.empty:
                raise ValueError(f"{filename} has no rows")

            logging.info(f"Loaded {len(df)} rows from {filename}")
            return df

        except FileNotFoundError:
            logging.error(f"Could not find {filename} in {self.data_path}")
            raise FileNotFoundError(f"Could not find {filename} in {self.data_path}")
        except pd.errors.EmptyDataError:
            logging.error(f"{filename} is empty")
            raise ValueError(f"{filename} is empty")
        except Exception as e:
            logging.error(f"Error loading {filename}: {str(e)}")
            raise

    def load_facilities(self) -> List[Facility]:
        """Load facilities.csv into Facility objects"""
        df = self.load_file("facilities.csv", self.required_facility_columns)
        self.validate_data_types(
            df, "facilities.csv", ["co2_factor", "energy_factor", "capacity"]
        )

        facilities = []
        for _, row in df.iterrows():
            try:
                x, y = _optional(row, "position_x"), _optional(row, "position_y")
                position = (float(x), float(y)) if x is not None and y is not None else None

                equipment = None
                manufacturer = _optional(row, "manufacturer")
                model = _optional(row, "model")
                year = _optional(row, "year_installed")
                if manufacturer is not None or model is not None or year is not None:
                    equipment = Equipment(
                        manufacturer=str(manufacturer) if manufacturer is not None else None,
                        model=str(model) if model is not None else None,
                        year_installed=int(year) if year is not None else None,
                    )

                facilities.append(
                    Facility(
                        id=str(row["id"]).strip(),
                        name=str(row["name"]).strip(),
                        category=str(row["category"]),
                        co2_factor=float(row["co2_factor"]),
                        energy_factor=float(row["energy_factor"]),
                        capacity=float(row["capacity"]),
                        position=position,
                        equipment=equipment,
                    )
                )
            except (KeyError, ValueError) as e:
                logging.error(f"Error processing facility data: {e}")
                raise

        return facilities

    def load_connections(self) -> List[Connection]:
        """Load connections.csv into Connection objects"""
        df = self.load_file("connections.csv", self.required_connection_columns)
        self.validate_data_types(df, "connections.csv", ["distance", "pipeline_co2"])

        connections = []
        for _, row in df.iterrows():
            try:
                size = _optional(row, "pipeline_size")
                connections.append(
                    Connection(
                        id=str(row["id"]).strip(),
                        source=str(row["from_id"]).strip(),
                        destination=str(row["to_id"]).strip(),
                        distance=float(row["distance"]),
                        pipeline_co2=float(row["pipeline_co2"]),
                        pipeline_size=float(size) if size is not None else None,
                    )
                )
            except (KeyError, ValueError) as e:
                logging.error(f"Error processing connection data: {e}")
                raise

        return connections

    def load_network(self) -> Tuple[List[Facility], List[Connection]]:
        """Load both files of the facility network"""
        return self.load_facilities(), self.load_connections()

    def validate_data_types(
        self, df: pd.DataFrame, filename: str, numeric_columns: List[str]
    ) -> None:
        """
        Validate data types for numeric columns

        Args:
            df: DataFrame to validate
            filename: Name of the file for error reporting
            numeric_columns: Columns that must hold non-negative numbers

        Raises:
            ValueError: If numeric data validation fails
        """
        for col in numeric_columns:
            values = pd.to_numeric(df[col], errors="coerce")
            if values.isnull().any():
                raise ValueError(
                    f"Column {col} in {filename} contains missing or non-numeric values"
                )
            if (values < 0).any():
                raise ValueError(f"Column {col} in {filename} contains negative values")
