# sv2upstream

The pool-facing half of a translator proxy that connects Stratum V1 miners
to a Stratum V2 pool. It keeps the state of the connection to the pool and
handles the messages that go both ways:

- `sv2upstream.handlers.setup_connection_message` builds the
  `SetupConnection` handshake message; `sv2upstream.tasks.connect` sends it,
  handles the `SetupConnectionSuccess` reply and asks for an extended mining
  channel with `OpenExtendedMiningChannel`, then resets the configured
  nominal hashrate to 0 so that downstreams manage it from then on.
- `Upstream.handle_message_mining` routes pool messages
  (`OpenExtendedMiningChannelSuccess`, `NewExtendedMiningJob`,
  `SetNewPrevHash`, `SetTarget`, `SetCustomMiningJobSuccess`,
  `SubmitSharesSuccess`, `CloseChannel` and the error messages) to their
  handlers, which update the channel id, extranonce prefix, target and job
  ids.
- `sv2upstream.tasks.process_incoming` handles one pool message and passes on
  what comes out of it: the extended extranonce and channel id, new jobs and
  new previous hashes go onto the `Upstream`'s queues; `CloseChannel` raises
  `NoUpstreamsConnected`; error messages raise `ProtocolErrorMessage`.
- `ExtendedExtranonce.from_upstream_extranonce` and
  `sv2upstream.utils.proxy_extranonce1_len` split the extranonce space
  between pool, proxy and miner.
- `sv2upstream.tasks.submit_share` stamps a `SubmitSharesExtended` with the
  current channel and job ids and sends it upstream.
- `sv2upstream.tasks.try_update_hashrate` sends `UpdateChannel` when the
  nominal hashrate in `UpstreamDifficultyConfig` differs from the last one
  sent, then sleeps for `channel_diff_update_interval` seconds.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
import asyncio

from sv2upstream.connection import UpstreamConnection
from sv2upstream.handlers import Upstream, UpstreamDifficultyConfig
from sv2upstream.tasks import connect, handle_submit, parse_incoming


async def run(incoming: asyncio.Queue, outgoing: asyncio.Queue) -> None:
    upstream = Upstream(
        min_extranonce_size=4,
        difficulty_config=UpstreamDifficultyConfig(
            channel_diff_update_interval=60,
            channel_nominal_hashrate=10_000.0,
        ),
        connection=UpstreamConnection(receiver=incoming, sender=outgoing),
    )
    await connect(upstream, min_version=2, max_version=2)
    await asyncio.gather(*parse_incoming(upstream), handle_submit(upstream))
```

`parse_incoming` starts two tasks: one that handles every message read from
the connection, and one that, after a 10 second delay, keeps calling
`try_update_hashrate`. `handle_submit` starts a task that reads shares from
`Upstream.rx_submit_shares` and sends them with `submit_share`. All tasks are
also recorded in `Upstream.task_collector` with their names.

What goes downstream arrives on the queues the `Upstream` holds:
`tx_extranonce` receives `(ExtendedExtranonce, channel_id)` pairs,
`tx_new_ext_mining_job` new jobs and `tx_set_new_prev_hash` new previous
hashes. When a task stops because of an error it puts a `Status` (the task
name and the error) on `tx_status` and ends. Errors are subclasses of
`ProxyError` from `sv2upstream.errors`.

## What it does not do

The connection carries message objects, not bytes: there is no TCP
connection, frame encoding or handshake encryption here, and the caller has
to feed the two queues of an `UpstreamConnection`. There is no downstream
(Stratum V1) server, no bridge that turns jobs into `mining.notify`, no
configuration file loading and no command to run.