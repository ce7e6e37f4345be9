from typing import Any, Dict, Union

import msgpack
import orjson


class MessageCodec:
    """MessagePack for binary frames, JSON (orjson) for text frames."""

    @staticmethod
    def encode_message(*, data: Dict[str, Any], use_binary: bool = False) -> Union[str, bytes]:
        if use_binary:
            return msgpack.packb(data)  # type: ignore
        return orjson.dumps(data).decode()

    @staticmethod
    def decode_message(*, raw_data: Union[str, bytes]) -> Dict[str, Any]:
        try:
            if isinstance(raw_data, bytes):
                message = msgpack.unpackb(raw_data, raw=False)
            else:
                message = orjson.loads(raw_data)
        except ValueError as e:  # orjson and msgpack decode errors are ValueErrors
            raise ValueError(f'Failed to decode message: {e}')
        if not isinstance(message, dict):
            raise ValueError('Message must be an object')
        return message
