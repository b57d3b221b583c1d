import json

import pytest

from cordai.core.frames import (
    DataStreamFrameEncoder,
    ErrorFrame,
    FinishFrame,
    SSEFrameEncoder,
    TextDeltaFrame,
    get_frame_encoder,
)


def test_sse_encoding_and_trailer():
    encoder = SSEFrameEncoder()

    text = encoder.encode(TextDeltaFrame(delta="Hel"))
    finish = encoder.encode(FinishFrame(usage={"completionTokens": 3}))

    assert text == 'data: {"type": "text-delta", "delta": "Hel"}\n\n'
    assert json.loads(finish[len("data: "):]) == {
        "type": "finish",
        "finishReason": "stop",
        "usage": {"completionTokens": 3},
    }
    assert encoder.close() == "data: [DONE]\n\n"
    assert encoder.media_type == "text/event-stream"


def test_data_stream_encoding():
    encoder = DataStreamFrameEncoder()

    assert encoder.encode(TextDeltaFrame(delta='say "hi"\n')) == '0:"say \\"hi\\"\\n"\n'
    assert encoder.encode(ErrorFrame(message="boom")) == '3:"boom"\n'

    finish = encoder.encode(FinishFrame(finishReason="tool-calls", usage={"completionTokens": 7}))
    assert finish.startswith("d:")
    assert json.loads(finish[2:]) == {
        "finishReason": "tool-calls",
        "usage": {"promptTokens": None, "completionTokens": 7},
    }
    assert encoder.close() is None
    assert encoder.headers["x-vercel-ai-data-stream"] == "v1"


def test_get_frame_encoder():
    assert isinstance(get_frame_encoder("sse"), SSEFrameEncoder)
    assert isinstance(get_frame_encoder("Data-Stream"), DataStreamFrameEncoder)
    with pytest.raises(ValueError):
        get_frame_encoder("websocket")
