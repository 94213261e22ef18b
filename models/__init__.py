from models.contact import Contact
from models.document import Document
from models.loan import Loan
from models.message import Message
from models.task import Task

__all__ = [
    "Contact",
    "Document",
    "Loan",
    "Message",
    "Task",
]
