# vmpc/mpc_core/network.py
"""In-process message router between simulated parties.

There is no transport: a message is an immutable record dropped into the
recipient's mailbox and popped from it when the recipient collects. A mailbox
slot is keyed by (round, var_id, sender), which gives exactly-once delivery
and keeps different rounds of the same id apart.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Hashable, List, Tuple

from .errors import ProtocolAbort
from .sharing import Share

log = logging.getLogger(__name__)

_Slot = Tuple[int, Hashable, int]


@dataclass(frozen=True)
class Message:
    sender: int
    recipient: int
    round: int
    var_id: Hashable
    share: Share

    def __repr__(self):
        return f"Message({self.sender}->{self.recipient}, round={self.round}, id={self.var_id!r})"


class Network:
    """One mailbox per party."""

    def __init__(self, n_parties: int):
        self.n_parties = n_parties
        self._boxes: Dict[int, Dict[_Slot, Message]] = {p: {} for p in range(n_parties)}
        self.sent = 0
        self.delivered = 0

    def _box(self, party: int):
        try:
            return self._boxes[party]
        except KeyError:
            raise ProtocolAbort(f"unknown party {party}") from None

    def send(self, message: Message):
        box = self._box(message.recipient)
        slot = (message.round, message.var_id, message.sender)
        if slot in box:
            raise ProtocolAbort(
                f"party {message.sender} sent id {message.var_id!r} to party "
                f"{message.recipient} twice in round {message.round}"
            )
        box[slot] = message
        self.sent += 1
        log.debug("[network] %d -> %d round=%d id=%r", message.sender, message.recipient,
                  message.round, message.var_id)

    def receive(self, recipient: int, round_no: int, var_id, sender: int) -> Share:
        box = self._box(recipient)
        msg = box.pop((round_no, var_id, sender), None)
        if msg is None:
            raise ProtocolAbort(
                f"party {recipient} got no contribution from party {sender} "
                f"for id {var_id!r} in round {round_no}"
            )
        self.delivered += 1
        return msg.share

    def gather(self, recipient: int, round_no: int, var_id, senders) -> List[Share]:
        """Receive from every sender; abort naming all that were silent."""
        box = self._box(recipient)
        silent = [s for s in senders if (round_no, var_id, s) not in box]
        if silent:
            raise ProtocolAbort(
                f"party {recipient} got no contribution from part{'y' if len(silent) == 1 else 'ies'} "
                f"{', '.join(map(str, silent))} for id {var_id!r} in round {round_no}"
            )
        return [self.receive(recipient, round_no, var_id, s) for s in senders]

    def pending(self, recipient: int = None) -> int:
        if recipient is not None:
            return len(self._box(recipient))
        return sum(len(b) for b in self._boxes.values())
