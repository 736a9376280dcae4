from simulator.events import MachineHooks
from simulator.machine_config import Status
from simulator.tape import TapeMemory


class TuringMachine:
    """
    Deterministic single-tape machine driven by a shared Configuration.

    The machine owns its tape, head and status; the configuration is only
    read, so several machines may run the same configuration side by side.
    With allow_undefined=False a missing transition rejects; with True the
    machine stays ACTIVE and the step does nothing.
    """

    def __init__(self, configuration, blank, allow_undefined=False, hooks=None):
        self.configuration = configuration
        self.allow_undefined = allow_undefined
        self.hooks = hooks or MachineHooks()
        self.memory = TapeMemory(blank, on_read=self.hooks.on_read, on_write=self.hooks.on_write)
        self.current_state = configuration.get_state(configuration.start_state_id)
        self.current_address = 0
        self.status = None
        self.steps = 0

    @property
    def blank(self):
        return self.memory.blank

    @property
    def current_state_id(self):
        return self.current_state.id

    @property
    def is_initialized(self):
        return self.status is not None

    @property
    def has_halted(self):
        # Literal predicate: under allow_undefined it is True exactly while ACTIVE.
        if self.allow_undefined:
            return self.status == Status.ACTIVE
        return self.status != Status.ACTIVE

    def initialize(self, symbols):
        """Load `symbols` from address 0 and make the machine runnable."""
        self.reset()
        self.memory.load(symbols)
        self.status = Status.ACTIVE

    def reset(self):
        self.memory.clear()
        self.current_state = self.configuration.get_state(self.configuration.start_state_id)
        self.current_address = 0
        self.status = None
        self.steps = 0

    def step(self):
        if self.status is None:
            raise RuntimeError("initialize() must be called before the machine can step.")
        if self.status != Status.ACTIVE:
            return

        self.steps += 1
        symbol = self.memory.read(self.current_address)
        try:
            transition = self.configuration.get_transition(self.current_state.id, symbol)
            target = self.configuration.get_state(transition.target_id)
        except LookupError:
            if not self.allow_undefined:
                self.status = Status.HALTED_REJECT
        else:
            self.memory.write(self.current_address, transition.output_symbol)
            self.current_address += transition.action.offset
            if self.hooks.on_transition is not None:
                self.hooks.on_transition(self.current_state, transition)
            self.current_state = target
            if target.is_accepting:
                self.status = Status.HALTED_ACCEPT
            elif target.is_rejecting:
                self.status = Status.HALTED_REJECT

        if self.status != Status.ACTIVE and self.hooks.on_halted is not None:
            self.hooks.on_halted(self.status)

    def run(self, max_steps=10000):
        """Step until the machine leaves ACTIVE or `max_steps` is reached. Returns steps taken."""
        steps = 0
        while self.status == Status.ACTIVE and steps < max_steps:
            self.step()
            steps += 1
        return steps

    # === Observation ===
    def tape_window(self, radius=20):
        return self.memory.window(self.current_address, radius)

    def available_transitions(self):
        return tuple(self.current_state.transitions.values())

    def __repr__(self):
        status = self.status.name if self.status is not None else "UNINITIALIZED"
        return f"TuringMachine(state={self.current_state.id}, address={self.current_address}, status={status})"


def create_machine(configuration, blank, allow_undefined=False, hooks=None):
    return TuringMachine(configuration, blank, allow_undefined=allow_undefined, hooks=hooks)
