"""Tests for a single virtual machine and its state machine."""
import pytest

from vmpc.mpc_core import (
    Add, Const, Input, MachineState, MachineStateError, Mul, Network, Output, Prg,
    ScalarMul, Share, Sub, TypeMismatch, UndefinedVariable, UnsupportedOperation,
    VirtualMachine,
)

P = 2**61 - 1


@pytest.fixture
def vm(field):
    machine = VirtualMachine(0, 2, field, Prg(b"vm"), Network(2))
    machine.start()
    return machine


def test_lifecycle(field):
    machine = VirtualMachine(1, 3, field, Prg(), Network(3))
    assert machine.state is MachineState.IDLE
    assert machine.peers == [0, 2]
    with pytest.raises(MachineStateError):
        machine.execute(Const(id="c", value=1))
    machine.provide_input("x", 5)
    machine.start()
    assert machine.live
    with pytest.raises(MachineStateError):
        machine.start()
    with pytest.raises(MachineStateError):
        machine.provide_input("y", 1)
    machine.halt()
    assert machine.state is MachineState.HALTED
    assert machine.error is None
    with pytest.raises(MachineStateError):
        machine.execute(Const(id="c", value=1))


def test_halt_keeps_first_error(vm):
    err = UndefinedVariable("x")
    vm.halt(err)
    vm.halt(ValueError("later"))
    assert vm.error is err


def test_party_id_in_range(field):
    with pytest.raises(ValueError):
        VirtualMachine(2, 2, field, Prg(), Network(2))


def test_input_only_for_owner(vm):
    vm.execute(Input(id="mine", party=0, value=4))
    vm.execute(Input(id="theirs", party=1, value=9))
    assert vm.private.read_public("mine") == 4
    assert "theirs" not in vm.private
    assert "mine" not in vm.memory


def test_input_from_provided_values(field):
    machine = VirtualMachine(0, 2, field, Prg(), Network(2))
    machine.provide_input("x", P + 3)
    machine.start()
    machine.execute(Input(id="x", party=0))
    assert machine.private.read_public("x") == 3


def test_missing_private_input(vm):
    with pytest.raises(UndefinedVariable):
        vm.execute(Input(id="x", party=0))


def test_public_arithmetic(vm):
    vm.execute(Const(id="a", value=3))
    vm.execute(Const(id="b", value=5))
    vm.execute(Add(dest="s", a="a", b="b"))
    vm.execute(Sub(dest="d", a="a", b="b"))
    vm.execute(Mul(dest="m", a="a", b="b"))
    vm.execute(ScalarMul(dest="k", a="a", scalar=-1))
    assert vm.memory.read("s") == 8
    assert vm.memory.read("d") == P - 2
    assert vm.memory.read("m") == 15
    assert vm.memory.read("k") == P - 3


def test_mixed_arithmetic_on_party_zero(vm, field):
    vm.memory.write("x", Share(0, field(10)))
    vm.execute(Const(id="c", value=4))
    vm.execute(Add(dest="xc", a="x", b="c"))
    vm.execute(Add(dest="cx", a="c", b="x"))
    vm.execute(Sub(dest="x-c", a="x", b="c"))
    vm.execute(Sub(dest="c-x", a="c", b="x"))
    vm.execute(Mul(dest="x*c", a="x", b="c"))
    assert vm.memory.read_secret("xc").value == 14
    assert vm.memory.read_secret("cx").value == 14
    assert vm.memory.read_secret("x-c").value == 6
    assert vm.memory.read_secret("c-x").value == P - 6
    assert vm.memory.read_secret("x*c").value == 40


def test_other_parties_ignore_public_offsets(field):
    machine = VirtualMachine(1, 2, field, Prg(), Network(2))
    machine.start()
    machine.memory.write("x", Share(1, field(10)))
    machine.execute(Const(id="c", value=4))
    machine.execute(Add(dest="xc", a="x", b="c"))
    machine.execute(Sub(dest="c-x", a="c", b="x"))
    assert machine.memory.read_secret("xc").value == 10
    assert machine.memory.read_secret("c-x").value == P - 10


def test_secret_product_unsupported(vm, field):
    vm.memory.write("x", Share(0, field(2)))
    vm.memory.write("y", Share(0, field(3)))
    with pytest.raises(UnsupportedOperation):
        vm.execute(Mul(dest="z", a="x", b="y"))


def test_output(vm, field):
    vm.execute(Const(id="c", value=11))
    vm.execute(Output(id="c"))
    assert vm.outputs == {"c": 11}
    vm.memory.write("s", Share(0, field(1)))
    with pytest.raises(TypeMismatch):
        vm.execute(Output(id="s"))


def test_destination_kind_is_kept(vm, field):
    vm.execute(Const(id="c", value=1))
    vm.memory.write("s", Share(0, field(1)))
    with pytest.raises(TypeMismatch):
        vm.execute(Add(dest="c", a="s", b="s"))
