"""
tx-annotator: classify and enrich EVM transactions.

Entry point: resolve_transaction_annotation()
"""

from .services.enrichment import (
    AnnotationType,
    AnnotationWarning,
    Annotation,
    ContractInteractionAnnotation,
    ContractDeploymentAnnotation,
    AssetTransferAnnotation,
    AssetApprovalAnnotation,
    Transaction,
    EVMLog,
    Network,
    get_network,
    ChainService,
    IndexingService,
    NameService,
    resolve_transaction_annotation,
)

__version__ = "0.1.0"
