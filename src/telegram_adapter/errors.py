"""远端调用异常"""

import json
from typing import Optional


class SenderError(Exception):
    """远端接口调用失败，携带动作、参数、返回码与 Bot ID"""

    def __init__(self, args: dict, action: str, retcode: int,
                 self_id: Optional[int]):
        super().__init__(
            f"Error when trying to send to {action}, "
            f"args: {json.dumps(args, ensure_ascii=False, default=str)}, "
            f"retcode: {retcode}"
        )
        self.params = args
        self.action = action
        self.code = retcode
        self.self_id = self_id
