"""Public API surface for the DApp demo.

- /demo/* endpoints: fund dev accounts, deploy DAppToken and Counter
- /token/<address>/...: DAppToken views (GET) and transactions (POST)
- /counter/<address>/...: Counter
- /eth/send: raw ETH transfer (custody deposit when sent to a DAppToken)
"""

from django.urls import path
from .views_demo import seed, fund, deploy_token_view, deploy_counter_view
from . import views_ops as ops
from . import views_read as read


urlpatterns = [
	path("health", ops.health),
	path("csrf", ops.csrf),
	path("demo/seed", seed),
	path("demo/fund", fund),
	path("demo/deploy/token", deploy_token_view),
	path("demo/deploy/counter", deploy_counter_view),

	# token reads
	path("token/<str:address>", read.token_info),
	path("token/<str:address>/balance/<str:account>", read.balance_of),
	path("token/<str:address>/allowance/<str:owner>/<str:spender>", read.allowance),
	path("token/<str:address>/stakes/<str:account>", read.stakes),
	path("token/<str:address>/stakes/<str:account>/<int:index>", read.stake_details),
	path("token/<str:address>/eth", read.eth_balance),
	path("token/<str:address>/eth/<str:account>", read.user_eth_balance),
	path("token/<str:address>/events", read.token_events),

	# token transactions
	path("token/<str:address>/transfer", ops.transfer),
	path("token/<str:address>/approve", ops.approve),
	path("token/<str:address>/transfer-from", ops.transfer_from),
	path("token/<str:address>/mint", ops.mint),
	path("token/<str:address>/burn", ops.burn),
	path("token/<str:address>/transfer-ownership", ops.transfer_ownership),
	path("token/<str:address>/stake", ops.stake),
	path("token/<str:address>/unstake", ops.unstake),
	path("token/<str:address>/withdraw-my-eth", ops.withdraw_my_eth),
	path("token/<str:address>/withdraw-all-my-eth", ops.withdraw_all_my_eth),
	path("token/<str:address>/withdraw-eth", ops.withdraw_eth),
	path("token/<str:address>/withdraw-all-eth", ops.withdraw_all_eth),
	path("token/<str:address>/emergency-withdraw", ops.emergency_withdraw),

	# counter
	path("counter/<str:address>", read.counter),
	path("counter/<str:address>/inc", ops.counter_inc),
	path("counter/<str:address>/inc-by", ops.counter_inc_by),

	# native
	path("eth/send", ops.eth_send),
]
