from typing import List, Type

from .document_model import BaseDocument


def init_mylibrary_odm(handle, document_models: List[Type[BaseDocument]]) -> None:
    """Bind ``handle`` to every document class and install query fields."""
    for model in document_models:
        model.initialize_db(handle)
        model.initialize_fields()
