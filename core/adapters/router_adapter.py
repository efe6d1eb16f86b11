"""Adapter over the local AMM router stub.

In production this would call addLiquidityETH on a Uniswap V2 router with the
ETH attached. The router's own reverts are surfaced as vault errors here.
"""

from router_stub import router

from ..errors import Expired, SlippageExceeded


class RouterAdapter:
	"""
	Liquidity primitive returning what the router actually consumed
	"""

	@staticmethod
	def address() -> str:
		return router.router_address()


	@staticmethod
	def add_liquidity(sender: str, token_amount: int, min_token: int, min_base: int, deadline: int, recipient: str, value: int) -> dict:
		"""
		Returns {"token_consumed", "base_consumed", "liquidity"}.
		"""
		try:
			return router.add_liquidity_eth(
				sender=sender,
				amount_token_desired=token_amount,
				amount_token_min=min_token,
				amount_base_min=min_base,
				to=recipient,
				deadline=deadline,
				value=value,
			)
		except router.InsufficientTokenAmount as e:
			raise SlippageExceeded(f"token leg below min_token={min_token}: {e}") from e
		except router.InsufficientBaseAmount as e:
			raise SlippageExceeded(f"base leg below min_base={min_base}: {e}") from e
		except router.RouterExpired as e:
			raise Expired(f"router rejected deadline {deadline}: {e}") from e
