from .stl import STL_RECORD_DTYPE, BinaryStlSink, StlSink, TextStlSink, open_stl_sink
