"""Signers: local-key and remote-approval variants behind one capability."""

from .base import Signer
from .keypair import KeyPairSigner
from .remote import ApprovalSession, HttpApprovalSession, RemoteApprovalSigner

__all__ = [
    "ApprovalSession",
    "HttpApprovalSession",
    "KeyPairSigner",
    "RemoteApprovalSigner",
    "Signer",
]
