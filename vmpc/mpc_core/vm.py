# vmpc/mpc_core/vm.py
"""One simulated party.

A VirtualMachine owns three stores:
  - `inputs`: raw private values handed to this party before the run;
  - `private`: plaintexts recorded by `input` instructions, never sent anywhere;
  - `memory`: public values and this party's shares, addressed by the ids the
    circuit uses (the same id names the same secret at every party).

Each instruction runs in two phases so the orchestrator can keep every party in
lock-step: `post` does the local work and sends outgoing messages, `collect`
reads whatever peers sent in the same round. Local instructions do all their
work in `post`.
"""
import enum
import logging

from .errors import MachineStateError, UndefinedVariable
from .field import Field
from .instructions import VarId
from .memory import Memory
from .network import Message, Network
from .sharing import AdditiveScheme, Share

log = logging.getLogger(__name__)


class MachineState(enum.Enum):
    IDLE = "idle"
    EXECUTING = "executing"
    HALTED = "halted"


class VirtualMachine:

    def __init__(self, party_id: int, n_parties: int, field: Field, prg, network: Network):
        if not 0 <= party_id < n_parties:
            raise ValueError(f"party id {party_id} outside 0..{n_parties - 1}")
        self.party_id = party_id
        self.n_parties = n_parties
        self.field = field
        self.prg = prg
        self.network = network
        self.scheme = AdditiveScheme(field, n_parties)
        self.inputs = {}
        self.private = Memory()
        self.memory = Memory()
        self.outputs = {}
        self.state = MachineState.IDLE
        self.error = None

    def __repr__(self):
        return f"VirtualMachine(party={self.party_id}, state={self.state.value})"

    @property
    def peers(self):
        return [p for p in range(self.n_parties) if p != self.party_id]

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def provide_input(self, var_id: VarId, value: int):
        if self.state is not MachineState.IDLE:
            raise MachineStateError(f"party {self.party_id}: inputs must be given before the run starts")
        self.inputs[var_id] = value

    def start(self):
        if self.state is not MachineState.IDLE:
            raise MachineStateError(f"party {self.party_id} cannot start from state {self.state.value}")
        self.state = MachineState.EXECUTING
        log.debug("[vm %d] executing", self.party_id)

    def halt(self, error: Exception = None):
        if self.state is MachineState.HALTED:
            return
        self.state = MachineState.HALTED
        self.error = error
        if error is not None:
            log.warning("[vm %d] halted: %s: %s", self.party_id, type(error).__name__, error)
        else:
            log.debug("[vm %d] halted", self.party_id)

    @property
    def live(self) -> bool:
        return self.state is MachineState.EXECUTING

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------
    def post(self, instr, round_no: int):
        self._require_executing(instr)
        handler = getattr(self, f"_post_{instr.op}")
        handler(instr, round_no)

    def collect(self, instr, round_no: int):
        self._require_executing(instr)
        handler = getattr(self, f"_collect_{instr.op}", None)
        if handler is not None:
            handler(instr, round_no)

    def execute(self, instr, round_no: int = 0):
        """Both phases back to back; only meaningful for local instructions."""
        self.post(instr, round_no)
        self.collect(instr, round_no)

    def _require_executing(self, instr):
        if self.state is not MachineState.EXECUTING:
            raise MachineStateError(f"party {self.party_id} cannot run {instr.op} in state {self.state.value}")

    # ------------------------------------------------------------------
    # input phase
    # ------------------------------------------------------------------
    def _post_input(self, instr, round_no):
        if instr.party != self.party_id:
            return
        value = instr.value
        if value is None:
            try:
                value = self.inputs[instr.id]
            except KeyError:
                raise UndefinedVariable(f"party {self.party_id} has no private input {instr.id!r}") from None
        self.private.write(instr.id, self.field(value))

    def _post_const(self, instr, round_no):
        self.memory.write(instr.id, self.field(instr.value))

    def _post_share(self, instr, round_no):
        if instr.party != self.party_id:
            return
        secret = self.private.read_public(instr.id)
        shares = self.scheme.split(secret, self.prg)
        for peer in self.peers:
            self.network.send(Message(self.party_id, peer, round_no, instr.id, shares[peer]))
        self.memory.write(instr.id, shares[self.party_id])
        log.debug("[vm %d] dealt id=%r to %d peers", self.party_id, instr.id, len(self.peers))

    def _collect_share(self, instr, round_no):
        if instr.party == self.party_id:
            return
        share = self.network.receive(self.party_id, round_no, instr.id, instr.party)
        self.memory.write(instr.id, share)

    # ------------------------------------------------------------------
    # local arithmetic
    # ------------------------------------------------------------------
    def _post_add(self, instr, round_no):
        x, y = self.memory.read(instr.a), self.memory.read(instr.b)
        if isinstance(x, Share) and not isinstance(y, Share):
            result = x.add_public(y)
        elif isinstance(y, Share) and not isinstance(x, Share):
            result = y.add_public(x)
        else:
            result = x + y
        self.memory.write(instr.dest, result)

    def _post_sub(self, instr, round_no):
        x, y = self.memory.read(instr.a), self.memory.read(instr.b)
        if isinstance(x, Share) and not isinstance(y, Share):
            result = x.sub_public(y)
        elif isinstance(y, Share) and not isinstance(x, Share):
            result = y.rsub_public(x)
        else:
            result = x - y
        self.memory.write(instr.dest, result)

    def _post_scalar_mul(self, instr, round_no):
        x = self.memory.read(instr.a)
        self.memory.write(instr.dest, x * self.field(instr.scalar))

    def _post_mul(self, instr, round_no):
        # Share * Share raises UnsupportedOperation
        x, y = self.memory.read(instr.a), self.memory.read(instr.b)
        self.memory.write(instr.dest, x * y)

    # ------------------------------------------------------------------
    # reconstruction and output
    # ------------------------------------------------------------------
    def _post_open(self, instr, round_no):
        if instr.id not in self.memory:
            # nothing to contribute; peers will abort when collecting
            log.warning("[vm %d] no share for id=%r, withholding", self.party_id, instr.id)
            return
        own = self.memory.read_secret(instr.id)
        for peer in self.peers:
            self.network.send(Message(self.party_id, peer, round_no, instr.id, own))

    def _collect_open(self, instr, round_no):
        received = self.network.gather(self.party_id, round_no, instr.id, self.peers)
        own = self.memory.read_secret(instr.id)
        value = self.scheme.combine([own] + received)
        self.memory.write(instr.dest, value)
        log.debug("[vm %d] opened id=%r into %r", self.party_id, instr.id, instr.dest)

    def _post_output(self, instr, round_no):
        self.outputs[instr.id] = self.memory.read_public(instr.id)
