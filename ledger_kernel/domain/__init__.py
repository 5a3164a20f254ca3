"""Pure domain core: conversion, commission strategies, inputs and DTOs."""
