"""Seed articles for the in-memory knowledge base."""
from datetime import datetime
from typing import List

from ..schemas.io_models import KnowledgeArticle

SAMPLE_ARTICLES = [
    {
        "id": "article-1",
        "title": "How to Process Returns and Refunds",
        "content": (
            "To process a return or refund, first verify the order details in our system. "
            "Check the return policy timeframe (30 days for most items). For eligible returns, "
            "generate a return shipping label and provide the customer with tracking information. "
            "Once we receive the item, inspect it for damage and process the refund within 3-5 business days."
        ),
        "category": "Returns & Refunds",
        "tags": ["returns", "refunds", "policy", "shipping"],
        "last_updated": datetime(2024, 1, 15),
    },
    {
        "id": "article-2",
        "title": "Handling Shipping Delays and Issues",
        "content": (
            "When customers report shipping delays, first check the tracking information in our carrier system. "
            "Common causes include weather delays, incorrect addresses, or carrier issues. Apologize for the "
            "inconvenience and provide updated tracking information. For delays over 7 days, offer expedited "
            "shipping on the replacement order or a partial refund."
        ),
        "category": "Shipping",
        "tags": ["shipping", "delays", "tracking", "carrier"],
        "last_updated": datetime(2024, 1, 10),
    },
    {
        "id": "article-3",
        "title": "Account and Password Reset Procedures",
        "content": (
            "To help customers reset their passwords, guide them to the \"Forgot Password\" link on the login page. "
            "They will receive an email with a reset link valid for 24 hours. If they do not receive the email, "
            "check if it went to spam or verify the email address on file. For account lockouts, verify the "
            "customer identity and manually unlock the account in the admin panel."
        ),
        "category": "Account Support",
        "tags": ["password", "account", "reset", "login", "email"],
        "last_updated": datetime(2024, 1, 12),
    },
    {
        "id": "article-4",
        "title": "Product Warranty and Technical Support",
        "content": (
            "Our products come with a 1-year manufacturer warranty covering defects and malfunctions. For warranty "
            "claims, collect the order number, product serial number, and description of the issue. For technical "
            "issues, first walk through basic troubleshooting steps. If the issue persists, escalate to our "
            "technical team or offer a warranty replacement."
        ),
        "category": "Technical Support",
        "tags": ["warranty", "technical", "troubleshooting", "replacement"],
        "last_updated": datetime(2024, 1, 8),
    },
    {
        "id": "article-5",
        "title": "Billing and Payment Issues",
        "content": (
            "For billing disputes, first review the transaction details and verify the charge amount. Common issues "
            "include duplicate charges, incorrect amounts, or unrecognized transactions. For payment failures, check "
            "if the payment method is valid and has sufficient funds. Offer alternative payment methods and update "
            "the customer on any pending charges."
        ),
        "category": "Billing",
        "tags": ["billing", "payment", "disputes", "charges", "credit card"],
        "last_updated": datetime(2024, 1, 14),
    },
]


def load_sample_articles() -> List[KnowledgeArticle]:
    """Fresh article models; embeddings are computed lazily by the service."""
    return [KnowledgeArticle(**row) for row in SAMPLE_ARTICLES]
