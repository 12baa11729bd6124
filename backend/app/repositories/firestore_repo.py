"""
Firestore Repository

Remote table client for the ledger mirror. The ledger only ever needs three
operations from the hosted store, so this class exposes exactly those and
nothing about transport, auth, or retries leaks past it.

Data Structure:
    {collection}/{transaction_id} - One remote record per transaction
                                    (fields: tipo, categoria, descricao, valor, data)

Configuration:
    endpoint - Google Cloud project id hosting the Firestore database
    key      - Path to a service-account JSON key for that project
"""

import hashlib
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1 import Client, Query

from app.core.exceptions import ConfigurationError
from app.core.logging import get_logger

logger = get_logger("rideledger.repositories.firestore")


class FirestoreRepository:
    """Remote mirror client backed by a single Firestore collection."""

    # Remote column used for newest-first ordering
    ORDER_FIELD = "data"

    def __init__(
        self,
        endpoint: str,
        key: str,
        collection: str = "transacoes",
        db: Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.collection = collection
        self.db = db if db is not None else self._connect(endpoint, key)

    @staticmethod
    def _connect(endpoint: str, key: str) -> Client:
        """
        Build a Firestore client for the given project and key.

        Each distinct endpoint/key pair gets its own named Firebase app so a
        reconfiguration never reuses stale credentials.

        Raises:
            ConfigurationError: If the key cannot be loaded or the app cannot start
        """
        digest = hashlib.md5(f"{endpoint}|{key}".encode(), usedforsecurity=False).hexdigest()[:12]
        app_name = f"rideledger-{digest}"
        try:
            try:
                app = firebase_admin.get_app(app_name)
            except ValueError:
                cred = credentials.Certificate(key)
                app = firebase_admin.initialize_app(cred, {"projectId": endpoint}, name=app_name)
            return firestore.client(app)
        except Exception as e:
            logger.error(f"Could not initialise Firestore for project '{endpoint}': {e}")
            raise ConfigurationError(
                "Remote store configuration is invalid. Check the endpoint and key.",
                details={"endpoint": endpoint},
            ) from e

    def select_all_ordered_by_date_desc(self) -> list[tuple[str, dict[str, Any]]]:
        """
        Fetch every remote record, newest date first.

        Returns:
            List of (document id, record) pairs
        """
        query = self.db.collection(self.collection).order_by(
            self.ORDER_FIELD, direction=Query.DESCENDING
        )
        return [(doc.id, doc.to_dict()) for doc in query.stream()]

    def insert_one(self, record_id: str, record: dict[str, Any]) -> None:
        """
        Write one record under the local transaction id.

        Args:
            record_id: Local transaction id, reused as the document id
            record: Remote-shaped record
        """
        self.db.collection(self.collection).document(record_id).set(record)

    def delete_by_id(self, record_id: str) -> None:
        """Delete the record stored under ``record_id``; absent ids are a no-op."""
        self.db.collection(self.collection).document(record_id).delete()
