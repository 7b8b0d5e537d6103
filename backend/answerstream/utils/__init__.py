from answerstream.utils.sse import DONE_SENTINEL, SSEFrameBuffer

__all__ = ["DONE_SENTINEL", "SSEFrameBuffer"]
