"""
Recognition Network

Convolutional backbone producing one feature vector per image column
slice, a self-attention encoder mixing the whole sequence, and a
per-position classifier trained with CTC (index 0 is the blank symbol).
"""

import math

import torch
from torch import nn


def conv_block(in_channels: int, out_channels: int) -> nn.Sequential:
    return nn.Sequential(
        nn.Conv2d(in_channels, out_channels, kernel_size=3, padding=1, bias=False),
        nn.BatchNorm2d(out_channels),
        nn.ReLU(inplace=True),
    )


class PositionalEncoding(nn.Module):
    """Fixed sinusoidal position encoding added to the sequence features."""

    def __init__(self, d_model: int, max_len: int = 512, dropout: float = 0.1):
        super().__init__()
        self.dropout = nn.Dropout(dropout)
        position = torch.arange(max_len).unsqueeze(1)
        div_term = torch.exp(torch.arange(0, d_model, 2) * (-math.log(10000.0) / d_model))
        pe = torch.zeros(max_len, d_model)
        pe[:, 0::2] = torch.sin(position * div_term)
        pe[:, 1::2] = torch.cos(position * div_term)
        self.register_buffer("pe", pe.unsqueeze(0), persistent=False)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = x + self.pe[:, :x.size(1)]
        return self.dropout(x)


class TextRecognitionNet(nn.Module):
    """
    CNN + Transformer encoder text line recognizer.

    Input:  (N, C, H, W) with H == input_height (a multiple of 16)
    Output: (N, W // 4, num_classes) unnormalized class scores

    Example:
        >>> net = TextRecognitionNet(num_classes=100)
        >>> net(torch.zeros(2, 1, 32, 384)).shape
        torch.Size([2, 96, 100])
    """

    def __init__(self, num_classes: int, input_height: int = 32, in_channels: int = 1,
                 d_model: int = 256, nhead: int = 8, num_layers: int = 4,
                 dropout: float = 0.1, max_len: int = 512):
        super().__init__()
        if input_height % 16:
            raise ValueError(f"input_height must be a multiple of 16, got {input_height}")

        self.backbone = nn.Sequential(
            conv_block(in_channels, 64),
            nn.MaxPool2d(2, 2),                    # H/2,  W/2
            conv_block(64, 128),
            nn.MaxPool2d(2, 2),                    # H/4,  W/4
            conv_block(128, 256),
            conv_block(256, 256),
            nn.MaxPool2d((2, 1), (2, 1)),          # H/8,  W/4
            conv_block(256, d_model),
            nn.MaxPool2d((2, 1), (2, 1)),          # H/16, W/4
        )
        feature_height = input_height // 16
        self.project = nn.Linear(d_model * feature_height, d_model)
        self.position = PositionalEncoding(d_model, max_len=max_len, dropout=dropout)
        layer = nn.TransformerEncoderLayer(
            d_model=d_model,
            nhead=nhead,
            dim_feedforward=4 * d_model,
            dropout=dropout,
            batch_first=True,
        )
        self.encoder = nn.TransformerEncoder(layer, num_layers=num_layers)
        self.classifier = nn.Linear(d_model, num_classes)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        features = self.backbone(x)                      # N, C, h, w
        n, c, h, w = features.shape
        features = features.permute(0, 3, 1, 2).reshape(n, w, c * h)
        sequence = self.position(self.project(features))
        sequence = self.encoder(sequence)
        return self.classifier(sequence)
