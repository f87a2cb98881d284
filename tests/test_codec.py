"""PCM16 / WAV codec tests"""

import struct

import numpy as np
import pytest

from speakbetter.audio import WAV_MIME_TYPE, AudioSampleBuffer, codec
from speakbetter.utils import AudioProcessingError, DecodeFailureError


class TestPcm16:
    """Float <-> 16-bit PCM scaling"""

    def test_asymmetric_scaling(self):
        """Test negatives scale by 0x8000 and positives by 0x7FFF"""
        pcm = codec.float_to_pcm16(np.array([1.0, -1.0, 0.5, -0.5, 0.0]))

        assert pcm.tolist() == [32767, -32768, 16383, -16384, 0]

    def test_out_of_range_is_clamped(self):
        """Test values beyond [-1, 1] saturate instead of wrapping"""
        pcm = codec.float_to_pcm16(np.array([2.0, -3.5]))

        assert pcm.tolist() == [32767, -32768]

    def test_bytes_are_little_endian(self):
        """Test the byte layout is little-endian signed 16-bit"""
        data = codec.float_to_pcm16_bytes(np.array([1.0, -1.0]))

        assert data == struct.pack("<hh", 32767, -32768)

    def test_pcm_back_to_float(self):
        """Test decoding maps the extremes back onto -1 and 1"""
        samples = codec.pcm16_to_float(struct.pack("<hhh", 32767, -32768, 0))

        assert samples.tolist() == [1.0, -1.0, 0.0]

    def test_round_trip_within_one_lsb(self):
        """Test encode then decode stays within one step across [-1, 1]"""
        values = np.linspace(-1.0, 1.0, 200001)

        decoded = codec.pcm16_to_float(codec.float_to_pcm16(values))

        step = np.where(values < 0, 1.0 / 0x8000, 1.0 / 0x7FFF)
        assert np.max(np.abs(values - decoded) / step) <= 1.0 + 1e-9

    def test_decoded_wav_is_float32(self):
        """Test decoded buffers hold float32 samples"""
        buffer = AudioSampleBuffer(np.array([0.5, -0.5], dtype=np.float32), 8000)

        decoded = codec.decode_wav(codec.encode_wav(buffer).data)

        assert decoded.samples.dtype == np.float32

    def test_odd_payload_rejected(self):
        """Test a payload that is not whole samples fails to decode"""
        with pytest.raises(DecodeFailureError):
            codec.pcm16_to_float(b"\x00\x01\x02")


class TestInterleave:
    def test_alternates_channels(self):
        """Test L, R, L, R ordering"""
        result = codec.interleave(np.array([1, 2, 3]), np.array([-1, -2, -3]))

        assert result.tolist() == [1, -1, 2, -2, 3, -3]

    def test_mismatched_lengths(self):
        """Test channels of different lengths are rejected"""
        with pytest.raises(AudioProcessingError):
            codec.interleave(np.zeros(3), np.zeros(4))


class TestWavHeader:
    """44-byte RIFF/WAVE header"""

    def test_header_fields(self):
        """Test every header field for mono 16 kHz audio"""
        header = codec.build_wav_header(200, 16000, 1)

        assert len(header) == 44
        assert header[0:4] == b"RIFF"
        assert struct.unpack_from("<I", header, 4)[0] == 236
        assert header[8:16] == b"WAVEfmt "
        assert struct.unpack_from("<IHHIIHH", header, 16) == (16, 1, 1, 16000, 32000, 2, 16)
        assert header[36:40] == b"data"
        assert struct.unpack_from("<I", header, 40)[0] == 200

    def test_stereo_block_align(self):
        """Test byte rate and block align account for both channels"""
        header = codec.build_wav_header(0, 44100, 2)

        byte_rate, block_align = struct.unpack_from("<IH", header, 28)
        assert byte_rate == 44100 * 4
        assert block_align == 4

    def test_invalid_parameters(self):
        """Test a non-positive sample rate is rejected"""
        with pytest.raises(AudioProcessingError):
            codec.build_wav_header(10, 0, 1)


class TestEncodeDecode:
    """WAV files in memory and on disk"""

    def test_encode_mono(self):
        """Test a mono buffer encodes to header plus two bytes per frame"""
        buffer = AudioSampleBuffer(np.zeros(100, dtype=np.float32), 16000)

        encoded = codec.encode_wav(buffer)

        assert encoded.mime_type == WAV_MIME_TYPE
        assert len(encoded) == 44 + 200

    def test_encode_stereo_interleaves(self):
        """Test stereo frames are written left then right"""
        samples = np.array([[0.5, -0.5], [0.5, -0.5]], dtype=np.float32)
        buffer = AudioSampleBuffer(samples, 8000, 2)

        payload = codec.encode_wav(buffer).data[44:]

        assert struct.unpack("<4h", payload) == (16383, -16384, 16383, -16384)

    def test_decode_restores_layout(self):
        """Test decoding keeps rate, channel count and frame count"""
        samples = np.stack([np.linspace(-1, 1, 50), np.linspace(1, -1, 50)], axis=1)
        original = AudioSampleBuffer(samples.astype(np.float32), 22050, 2)

        decoded = codec.decode_wav(codec.encode_wav(original).data)

        assert decoded.sample_rate == 22050
        assert decoded.channel_count == 2
        assert decoded.samples.shape == (50, 2)
        np.testing.assert_allclose(decoded.samples, original.samples, atol=1 / 32767)

    def test_decode_rejects_garbage(self):
        """Test non-WAV bytes raise DecodeFailure"""
        with pytest.raises(DecodeFailureError):
            codec.decode_wav(b"not a wav file at all, definitely not 44 bytes long")

    def test_decode_rejects_truncated_header(self):
        """Test a header that claims RIFF but is cut short"""
        with pytest.raises(DecodeFailureError):
            codec.decode_wav(b"RIFF\x00\x00\x00\x00WAVE")

    def test_save_wav(self, tmp_path):
        """Test saving writes the encoded bytes"""
        buffer = AudioSampleBuffer(np.full(10, 0.25, dtype=np.float32), 16000)

        path = codec.save_wav(tmp_path / "take.wav", buffer)

        assert path.read_bytes() == codec.encode_wav(buffer).data


class TestSampleScaling:
    """Helpers feeding the visualization pipeline"""

    @pytest.mark.parametrize("size", [129, 255, 256, 257, 1009, 48000])
    def test_downsample_any_longer_input_to_128(self, size):
        """Test every input longer than the target reduces to exactly 128"""
        reduced = codec.downsample(np.zeros(size, dtype=np.uint8), 128)

        assert reduced.size == 128

    def test_downsample_to_exact_count(self):
        """Test 1000 samples reduce to 128 bin means"""
        samples = np.arange(1000, dtype=np.uint8)

        reduced = codec.downsample(samples, 128)

        assert reduced.size == 128
        assert reduced.dtype == np.uint8
        assert reduced[0] == 3  # mean of 0..6

    def test_downsample_short_input_unchanged(self):
        """Test inputs already at or under the target pass through"""
        samples = np.arange(64, dtype=np.float32)

        assert np.array_equal(codec.downsample(samples, 128), samples)

    def test_float_to_byte_samples(self):
        """Test -1, 0 and 1 land on 0, 127 and 255"""
        result = codec.float_to_byte_samples(np.array([-1.0, 0.0, 1.0, 5.0]))

        assert result.tolist() == [0, 127, 255, 255]
