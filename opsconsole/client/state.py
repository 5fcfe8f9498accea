from dataclasses import dataclass, field
from typing import Dict, List, Optional
from opsconsole.models.vm import VMAction, VMKey, VMRecord


@dataclass
class ConsoleState:
    """Process-local page state; recreated with each controller"""

    vms: List[VMRecord] = field(default_factory=list)
    loading: bool = True
    error: Optional[str] = None
    action_locks: Dict[VMKey, Optional[VMAction]] = field(default_factory=dict)
    action_errors: Dict[VMKey, Optional[str]] = field(default_factory=dict)

    def release_lock(self, key: VMKey) -> None:
        self.action_locks[key] = None
