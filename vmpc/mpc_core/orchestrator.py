# vmpc/mpc_core/orchestrator.py
"""Drives a set of virtual machines through a shared circuit.

Every instruction is one round, and every round has two phases for all
parties: post (local work, outgoing messages) then collect (incoming
messages). No party sees a later round before all parties finished the current
one, so `open` and `share` act as barriers.

Two equivalent drivers are provided: `run` iterates the parties sequentially,
`run_async` gives each party its own asyncio task and synchronizes them with a
barrier. On the first round in which any party fails, every party is halted,
each failed party keeps its own error, and the error of the lowest failed
party is raised. There are no retries and no partial results.
"""
import asyncio
import logging
from typing import Dict, Iterable, Mapping, Optional, Union

from .config import MPCConfig
from .errors import MachineStateError, MPCError
from .field import Field
from .instructions import Circuit, PrivateInput
from .network import Network
from .prg import Prg, derive_seed
from .vm import MachineState, VirtualMachine

log = logging.getLogger(__name__)

Inputs = Union[Mapping[int, Mapping], Iterable[PrivateInput]]


class Orchestrator:

    def __init__(self, config: Optional[MPCConfig] = None, inputs: Optional[Inputs] = None):
        self.config = config if config is not None else MPCConfig()
        self.n_parties = self.config.parties
        self.field = Field(self.config.field)
        self.network = Network(self.n_parties)
        self.vms = [
            VirtualMachine(i, self.n_parties, self.field, Prg(derive_seed(self.config.seed, i)), self.network)
            for i in range(self.n_parties)
        ]
        self._used = False
        if inputs:
            self.provide_inputs(inputs)

    def __repr__(self):
        return f"Orchestrator(parties={self.n_parties}, p={self.field.p})"

    # ------------------------------------------------------------------
    # session surface
    # ------------------------------------------------------------------
    def vm(self, party: int) -> VirtualMachine:
        return self.vms[party]

    def provide_input(self, party: int, var_id, value: int):
        if not 0 <= party < self.n_parties:
            raise ValueError(f"party {party} outside 0..{self.n_parties - 1}")
        self.vms[party].provide_input(var_id, value)

    def provide_inputs(self, inputs: Inputs):
        if isinstance(inputs, Mapping):
            for party, values in inputs.items():
                for var_id, value in values.items():
                    self.provide_input(int(party), var_id, value)
        else:
            for item in inputs:
                self.provide_input(item.party, item.id, item.value)

    def run(self, circuit: Circuit) -> Dict[int, Dict]:
        """Sequential lock-step execution."""
        self._begin(circuit)
        try:
            for round_no, instr in enumerate(circuit.instructions):
                log.debug("[orchestrator] round %d: %s%s", round_no, instr.op,
                          " (barrier)" if instr.communicates else "")
                for vm in self.vms:
                    self._attempt(vm, vm.post, instr, round_no)
                for vm in self.vms:
                    self._attempt(vm, vm.collect, instr, round_no)
                self._check(round_no, instr)
        finally:
            self._halt_all()
        return self._finish()

    async def run_async(self, circuit: Circuit) -> Dict[int, Dict]:
        """One task per party, synchronized with a barrier at every phase."""
        self._begin(circuit)
        barrier = asyncio.Barrier(self.n_parties)

        async def drive(vm: VirtualMachine):
            try:
                for round_no, instr in enumerate(circuit.instructions):
                    self._attempt(vm, vm.post, instr, round_no)
                    await barrier.wait()
                    self._attempt(vm, vm.collect, instr, round_no)
                    await barrier.wait()
                    failed = any(v.error is not None for v in self.vms)
                    # nobody starts the next post until everyone has looked
                    await barrier.wait()
                    if failed:
                        return
            except BaseException:
                await barrier.abort()
                raise

        try:
            outcomes = await asyncio.gather(*(drive(vm) for vm in self.vms), return_exceptions=True)
            crashed = [e for e in outcomes if isinstance(e, BaseException)]
            if crashed:
                # the broken barrier is a symptom; raise what broke it
                raise next((e for e in crashed if not isinstance(e, asyncio.BrokenBarrierError)), crashed[0])
            self._check(None, None)
        finally:
            self._halt_all()
        return self._finish()

    def results(self) -> Dict[int, Dict]:
        """{party: {id: int}} for every value recorded by `output`."""
        return {vm.party_id: {k: int(v) for k, v in vm.outputs.items()} for vm in self.vms}

    def outputs(self, var_id) -> Dict[int, int]:
        """Per-party plaintext for one output id."""
        return {vm.party_id: int(vm.outputs[var_id]) for vm in self.vms if var_id in vm.outputs}

    @property
    def errors(self) -> Dict[int, Exception]:
        return {vm.party_id: vm.error for vm in self.vms if vm.error is not None}

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _begin(self, circuit: Circuit):
        if self._used:
            raise MachineStateError("a session runs exactly once; build a new Orchestrator")
        self._used = True
        circuit.check_parties(self.n_parties)
        log.info("[orchestrator] %d parties, %d instructions, p=2^%d-1",
                 self.n_parties, len(circuit.instructions), self.field.power)
        for vm in self.vms:
            vm.start()

    @staticmethod
    def _attempt(vm: VirtualMachine, phase, instr, round_no: int):
        if vm.state is not MachineState.EXECUTING:
            return
        try:
            phase(instr, round_no)
        except MPCError as e:
            vm.halt(e)
        except Exception as e:
            vm.halt(e)
            raise

    def _check(self, round_no, instr):
        failed = [vm for vm in self.vms if vm.error is not None]
        if not failed:
            return
        self._halt_all()
        where = f"round {round_no} ({instr.op})" if instr is not None else "run"
        log.error("[orchestrator] aborted in %s; failed parties: %s", where,
                  ", ".join(f"{vm.party_id}={type(vm.error).__name__}" for vm in failed))
        raise failed[0].error

    def _halt_all(self):
        for vm in self.vms:
            vm.halt()

    def _finish(self) -> Dict[int, Dict]:
        left = self.network.pending()
        if left:
            log.warning("[orchestrator] %d undelivered messages at end of run", left)
        results = self.results()
        log.info("[orchestrator] done; outputs: %s", results.get(0, {}))
        return results
