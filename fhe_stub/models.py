"""In-process ciphertext store simulating the confidential-computation engine.

Values are kept in cleartext behind an opaque handle; only the relayer's
user-decrypt path ever reads them back out.
"""

import uuid
from django.db import models


class Ciphertext(models.Model):
	"""
	One encrypted value. The owner and contract form its ACL.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	handle = models.CharField(max_length=66, unique=True)
	fhe_type = models.CharField(max_length=16, default="euint64")
	value = models.BigIntegerField()
	owner = models.CharField(max_length=42)
	contract_address = models.CharField(max_length=42)
	created_at = models.DateTimeField(auto_now_add=True)
